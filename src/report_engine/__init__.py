"""Report Engine Package.

Turns zone analytics into a printable report:
- models: Pydantic request, record and document models
- services: formatting, reduction, charts, document assembly, export
- adapters: data source, storage and file renderer interfaces
- config: Configuration management
- observability: Structured logging
"""

__version__ = "0.1.0"
