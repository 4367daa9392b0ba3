"""Library exceptions."""


class RectifierError(Exception):
    """Generic rectifier exception."""


class ConfigurationError(RectifierError):
    """The bundled API identity is missing or unreadable."""


class VersionMismatchError(RectifierError):
    """The remote service does not speak the EDAM version we were built for."""

    def __init__(self, major: int, minor: int):
        super().__init__(f"expected Evernote EDAM version {major}.{minor}")
        self.major = major
        self.minor = minor


class NotebookNotFound(RectifierError):
    """No notebook matches the requested name."""

    def __init__(self, name: str):
        super().__init__(f"couldn't find a Notebook named '{name}'")
        self.name = name


class MissingImageSourceError(RectifierError):
    """An ``img`` element has no ``src`` attribute."""


class UploadExhaustedError(RectifierError):
    """Updating a note would eat into the reserved upload allowance."""

    def __init__(
        self, upload_limit: int, uploaded: int, note_size: int, reserved_upload: int
    ):
        remaining = upload_limit - uploaded - note_size
        super().__init__(
            f"rectified note is {note_size:,} bytes, which uses "
            f"{reserved_upload - remaining:,} bytes of the reserved upload"
        )
        self.upload_limit = upload_limit
        self.uploaded = uploaded
        self.note_size = note_size
        self.reserved_upload = reserved_upload
