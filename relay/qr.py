"""QR surface generation for transport references."""

import base64
import io
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import qrcode
from qrcode.exceptions import DataOverflowError
from PIL import Image

from common.constants import (
    QR_BYTE_CAPACITY,
    QR_DARK_COLOR,
    QR_DEFAULT_MARGIN,
    QR_DEFAULT_WIDTH,
    QR_ECC_CROSSOVER_CHARS,
    QR_LIGHT_COLOR,
    QR_MAX_BYTES,
)
from common.exceptions import PayloadTooLargeForQR, ValidationError
from common.references import DirectFileRef, InlineRef, TransportReference, format_reference

logger = logging.getLogger(__name__)

ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

MODE_INLINE = "inline"
MODE_REFERENCE = "reference"
MODE_DIRECT_DOWNLOAD = "direct-download"


@dataclass(frozen=True)
class QROptions:
    width: int = QR_DEFAULT_WIDTH
    margin: int = QR_DEFAULT_MARGIN
    dark_color: str = QR_DARK_COLOR
    light_color: str = QR_LIGHT_COLOR


@dataclass(frozen=True)
class QRSurface:
    """
    A rendered QR code.

    Attributes:
        image_png: PNG bytes
        embedded_text: Exact text encoded in the symbol
        error_correction: Level used ("L" or "M")
        mode: "inline", "reference" or "direct-download"
    """
    image_png: bytes
    embedded_text: str
    error_correction: str
    mode: str

    def to_data_url(self) -> str:
        return "data:image/png;base64," + base64.b64encode(self.image_png).decode("ascii")


def select_error_correction(byte_length: int) -> str:
    """
    Pick the error-correction level for a text of the given UTF-8 length.

    Short texts get M for scan robustness; longer ones drop to L for capacity.
    """
    if byte_length <= QR_ECC_CROSSOVER_CHARS:
        return "M"
    return "L"


class QRGenerator:
    """
    Turns transport references into scannable QR surfaces.

    Large payloads are never embedded: only inline payloads travel inside
    the symbol, everything else is embedded as a short landing URL.
    """

    def __init__(self, public_base_url: str):
        self.public_base_url = public_base_url.rstrip("/")

    def embedded_text_for(self, reference: TransportReference) -> str:
        if isinstance(reference, InlineRef):
            return f"{self.public_base_url}/decode?data={quote(reference.payload, safe='')}"
        if isinstance(reference, DirectFileRef):
            return reference.url
        return f"{self.public_base_url}/decode?ref={quote(format_reference(reference), safe='')}"

    def fits(self, reference: TransportReference) -> bool:
        """Whether the embedded text for a reference fits in a QR symbol."""
        return len(self.embedded_text_for(reference).encode("utf-8")) <= QR_MAX_BYTES

    def mode_for(self, reference: TransportReference) -> str:
        if isinstance(reference, InlineRef):
            return MODE_INLINE
        if isinstance(reference, DirectFileRef):
            return MODE_DIRECT_DOWNLOAD
        return MODE_REFERENCE

    def generate(self, reference: TransportReference, options: Optional[QROptions] = None) -> QRSurface:
        """
        Render a QR code for a reference.

        Args:
            reference: Reference returned by a tier adapter
            options: Rendering options (width, margin, colours)

        Returns:
            QRSurface with PNG bytes and the embedded text

        Raises:
            PayloadTooLargeForQR: If the embedded text exceeds QR capacity
        """
        options = options or QROptions()
        text = self.embedded_text_for(reference)
        return render_text(text, self.mode_for(reference), options)


def render_text(text: str, mode: str, options: QROptions) -> QRSurface:
    if not text:
        raise ValidationError("Nothing to encode in the QR code")
    if options.width <= 0 or options.margin < 0:
        raise ValidationError("QR width must be positive and margin non-negative")

    byte_length = len(text.encode("utf-8"))
    level = select_error_correction(byte_length)
    if byte_length > QR_BYTE_CAPACITY[level]:
        raise PayloadTooLargeForQR(
            f"QR content of {byte_length} bytes exceeds the maximum of {QR_MAX_BYTES} bytes"
        )

    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECTION_LEVELS[level],
        box_size=1,
        border=options.margin,
    )
    qr.add_data(text)
    try:
        qr.make(fit=True)
    except DataOverflowError:
        raise PayloadTooLargeForQR(f"QR content of {byte_length} bytes does not fit in a QR code")

    total_modules = qr.modules_count + 2 * options.margin
    qr.box_size = max(1, options.width // total_modules)

    img = qr.make_image(fill_color=options.dark_color, back_color=options.light_color)
    image = img.get_image().convert("RGB")
    if image.size != (options.width, options.width):
        image = image.resize((options.width, options.width), Image.NEAREST)

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")

    logger.debug(f"Rendered QR code: {byte_length} bytes, level {level}, version {qr.version}")
    return QRSurface(
        image_png=buffer.getvalue(),
        embedded_text=text,
        error_correction=level,
        mode=mode,
    )
