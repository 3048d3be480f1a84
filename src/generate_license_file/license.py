from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class LicenseRecord:
    """A license text and every dependency that ships it."""

    content: str
    name: str
    version: str
    dependencies: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "name": self.name,
            "version": self.version,
            "dependencies": list(self.dependencies),
        }
