"""
TinyVG decoding and rendering utilities split into modules for reuse.
"""

from .context import DrawingContext, RecordingContext
from .decode import DEFAULT_MAX_COUNT, DecodeLimits, Decoder, decode, decode_file
from .errors import (
    CanvasTooLarge,
    ColorIndexOutOfRange,
    ContextFailure,
    CountLimitExceeded,
    GeometryCountMismatch,
    InvalidEnumValue,
    InvalidMagic,
    MalformedVarint,
    ParseError,
    RasterEncodingFailure,
    RenderError,
    TinyVGError,
    UnexpectedEof,
    UnsupportedVersion,
)
from .format import (
    ArcCircle,
    ArcEllipse,
    ClosePath,
    Color,
    ColorEncoding,
    CoordinateRange,
    CubicBezier,
    Document,
    DrawLineLoop,
    DrawLinePath,
    DrawLines,
    DrawLineStrip,
    FillPath,
    FillPolygon,
    FillRectangles,
    FlatColor,
    Header,
    HorizontalLine,
    Line,
    LinearGradient,
    LineSegment,
    OutlineFillPath,
    OutlineFillPolygon,
    OutlineFillRectangles,
    Point,
    QuadraticBezier,
    RadialGradient,
    Rect,
    SubPath,
    VerticalLine,
)
from .logging import DecodeTraceLogger
from .paint import LinearGradientPaint, RadialGradientPaint, SolidPaint, resolve_style
from .raster import PixelBuffer, RasterContext, encode_png
from .reader import DEFAULT_MAX_VARINT_BYTES, PrimitiveReader
from .render import DEFAULT_MAX_PIXELS, DEFAULT_TOLERANCE, RenderOptions, Renderer, render_to_raster
from .svg import SvgContext
from .text_format import to_text

__all__ = [
    "DrawingContext",
    "RecordingContext",
    "DEFAULT_MAX_COUNT",
    "DecodeLimits",
    "Decoder",
    "decode",
    "decode_file",
    "TinyVGError",
    "ParseError",
    "UnexpectedEof",
    "InvalidMagic",
    "UnsupportedVersion",
    "InvalidEnumValue",
    "MalformedVarint",
    "ColorIndexOutOfRange",
    "GeometryCountMismatch",
    "CountLimitExceeded",
    "RenderError",
    "ContextFailure",
    "RasterEncodingFailure",
    "CanvasTooLarge",
    "Header",
    "ColorEncoding",
    "CoordinateRange",
    "Color",
    "Point",
    "Rect",
    "LineSegment",
    "FlatColor",
    "LinearGradient",
    "RadialGradient",
    "Line",
    "HorizontalLine",
    "VerticalLine",
    "CubicBezier",
    "QuadraticBezier",
    "ArcCircle",
    "ArcEllipse",
    "ClosePath",
    "SubPath",
    "FillPolygon",
    "FillRectangles",
    "FillPath",
    "DrawLines",
    "DrawLineLoop",
    "DrawLineStrip",
    "DrawLinePath",
    "OutlineFillPolygon",
    "OutlineFillRectangles",
    "OutlineFillPath",
    "Document",
    "DecodeTraceLogger",
    "SolidPaint",
    "LinearGradientPaint",
    "RadialGradientPaint",
    "resolve_style",
    "PixelBuffer",
    "RasterContext",
    "encode_png",
    "DEFAULT_MAX_VARINT_BYTES",
    "PrimitiveReader",
    "DEFAULT_MAX_PIXELS",
    "DEFAULT_TOLERANCE",
    "RenderOptions",
    "Renderer",
    "render_to_raster",
    "SvgContext",
    "to_text",
]
