from __future__ import annotations

from typing import Iterable, Optional


class ReportError(RuntimeError):
    pass


class NotAGitRepository(ReportError):
    def __init__(self, message: str = "not a git repository"):
        super().__init__(message)


class IncompleteRepositoryMetadata(ReportError):
    def __init__(self, messages: Iterable[str]):
        self.messages = list(messages)
        super().__init__("\n".join(self.messages))


class ReportAssemblyError(ReportError):
    pass


class PackagingFailure(ReportError):
    def __init__(self, message: str, tmp_dir: Optional[str] = None):
        super().__init__(message)
        # set once the temporary directory exists so the caller can remove it
        self.tmp_dir = tmp_dir


class TempDirFailure(PackagingFailure):
    pass


class ArtifactCreateFailure(PackagingFailure):
    pass


class ArtifactWriteFailure(PackagingFailure):
    pass


class UploadFailure(ReportError):
    pass


class UploadSlotFailure(UploadFailure):
    pass


class NotificationFailure(UploadFailure):
    pass
