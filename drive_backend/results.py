from dataclasses import dataclass, field


@dataclass
class BulkResult:
    """Per-item outcome of a bulk operation that is allowed to partially fail."""

    successful: list = field(default_factory=list)
    failed: list = field(default_factory=list)

    def add_success(self, item_id, **detail):
        self.successful.append({"id": str(item_id), **detail})

    def add_failure(self, item_id, error):
        self.failed.append({
            "id": str(item_id),
            "error": getattr(error, "code", "error"),
            "message": getattr(error, "message", str(error)),
        })

    @property
    def summary(self):
        return {
            "total": len(self.successful) + len(self.failed),
            "successful": len(self.successful),
            "failed": len(self.failed),
        }

    def as_dict(self):
        return {
            "successful": self.successful,
            "failed": self.failed,
            "summary": self.summary,
        }
