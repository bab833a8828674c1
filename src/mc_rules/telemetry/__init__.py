from .diagnostics import CollectingDiagnostics, Diagnostic, Diagnostics, DiagnosticLevel, LoggingDiagnostics

__all__ = ["CollectingDiagnostics", "Diagnostic", "Diagnostics", "DiagnosticLevel", "LoggingDiagnostics"]
