"""
Result objects for core operations.

Provides a unified result structure that the CLI and the interactive menu
use to display operation outcomes consistently.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Any


@dataclass
class OperationResult:
    """
    Unified result object for all core operations.

    Attributes:
        ok: Whether the operation completed successfully
        operation: Name of the operation (e.g., "run_filter", "inspect_bitmap")
        source: Path of the bitmap that was read
        destination: Path of the bitmap that was written, if any
        transform: Name of the applied filter, if any
        width: Width in pixels of the resulting image
        height: Height in pixels of the resulting image
        warnings: Non-blocking issues encountered
        errors: Blocking errors that caused failure
        metadata: Additional operation-specific data
        logs: Captured log lines from the operation
    """
    ok: bool
    operation: str
    source: str = ""
    destination: str = ""
    transform: str = ""
    width: int = 0
    height: int = 0
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    logs: List[str] = field(default_factory=list)

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def add_error(self, message: str) -> None:
        """Add an error message and mark result as failed."""
        self.errors.append(message)
        self.ok = False

    def to_summary(self) -> str:
        """Generate a human-readable summary string."""
        status = "SUCCESS" if self.ok else "FAILED"
        lines = [f"[{status}] {self.operation}"]

        if self.source:
            lines.append(f"  Source: {self.source}")
        if self.transform:
            lines.append(f"  Filter: {self.transform}")
        if self.destination:
            lines.append(f"  Output: {self.destination}")
        if self.width and self.height:
            lines.append(f"  Size: {self.width}x{self.height}")

        if self.warnings:
            lines.append("  Warnings:")
            for warn in self.warnings:
                lines.append(f"    - {warn}")

        if self.errors:
            lines.append("  Errors:")
            for err in self.errors:
                lines.append(f"    - {err}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "ok": self.ok,
            "operation": self.operation,
            "source": self.source,
            "destination": self.destination,
            "transform": self.transform,
            "width": self.width,
            "height": self.height,
            "warnings": self.warnings,
            "errors": self.errors,
            "metadata": self.metadata,
            "logs": self.logs,
        }

    @classmethod
    def success(cls, operation: str, **kwargs) -> "OperationResult":
        """Create a successful result."""
        return cls(ok=True, operation=operation, **kwargs)

    @classmethod
    def failure(cls, operation: str, error: str, **kwargs) -> "OperationResult":
        """Create a failed result."""
        result = cls(ok=False, operation=operation, **kwargs)
        result.errors.append(error)
        return result
