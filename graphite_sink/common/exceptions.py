"""
Custom exceptions for the Graphite exporter.
Hierarchical exception structure for better error handling and debugging.
"""


class GraphiteSinkError(Exception):
    """Base exception for the Graphite exporter"""
    pass


class ConfigurationError(GraphiteSinkError):
    """Error in configuration loading or validation"""
    pass


class DuplicateMetricError(GraphiteSinkError):
    """A metric with the same name is already registered"""

    def __init__(self, name: str):
        super().__init__(f"Duplicate metric: {name}")
        self.name = name


class GraphiteExportError(GraphiteSinkError):
    """Generic error during an export cycle"""
    pass


class GraphiteConnectionError(GraphiteExportError):
    """Error connecting to the Graphite server; nothing was sent"""
    pass


class GraphiteWriteError(GraphiteExportError):
    """Error writing to or flushing the Graphite connection mid-cycle"""

    def __init__(self, message: str, lines_written: int = 0):
        super().__init__(message)
        self.lines_written = lines_written
