from __future__ import annotations


class TinyVGError(Exception):
    """Base class for everything this package raises on purpose."""


class ParseError(TinyVGError, ValueError):
    """Structural violation found while decoding; the whole document is rejected."""

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset 0x{offset:X})"
        super().__init__(message)


class UnexpectedEof(ParseError):
    pass


class InvalidMagic(ParseError):
    pass


class UnsupportedVersion(ParseError):
    pass


class InvalidEnumValue(ParseError):
    pass


class MalformedVarint(ParseError):
    pass


class ColorIndexOutOfRange(ParseError):
    pass


class GeometryCountMismatch(ParseError):
    pass


class CountLimitExceeded(GeometryCountMismatch):
    """A declared count is larger than the decoder is configured to allocate."""


class RenderError(TinyVGError, RuntimeError):
    pass


class ContextFailure(RenderError):
    pass


class CanvasTooLarge(RenderError):
    """The requested raster would exceed ``RenderOptions.max_pixels``."""


class RasterEncodingFailure(RenderError):
    pass
