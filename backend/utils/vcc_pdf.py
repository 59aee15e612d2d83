"""
PDF Generator for Vehicle Conformity Certificates (VCC)
Fixed 750x550 landscape card: background artwork, QR link to the public view,
and every field drawn at its printed position on the pre-designed form
"""
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas
from dataclasses import dataclass
from typing import Optional, Union
import qrcode
import requests
import asyncio
import logging
import base64
import json
import io
import os

from models.vehicle import VehicleRecord
from utils.vcc_format import spell_digits, format_date_dmy, is_predominantly_rtl

logger = logging.getLogger(__name__)

# ==================== PAGE SETUP ====================
# Coordinates below are measured from the top-left corner of the card,
# as printed on the paper form. ReportLab draws from the bottom-left.
PAGE_WIDTH, PAGE_HEIGHT = 750, 550

FONT_NAME = 'Helvetica'
FONT_SIZE = 12
LINE_HEIGHT_FACTOR = 1.15

QR_X, QR_Y, QR_SIZE = 53, 457, 70

REMARKS_Y = 458
REMARKS_RIGHT = 62
REMARKS_MARGIN = 5
REMARKS_WIDTH = 295

BACKGROUND_PLACEHOLDER = 'data:image/jpeg;base64,PUT_YOUR_BASE64_STRING_HERE'
DEFAULT_BACKGROUND_SOURCE = os.path.join(
    os.path.dirname(os.path.dirname(__file__)), 'static', 'background-image.json'
)

MODES = ('file', 'blob')

# seconds to wait on a remote background host
BACKGROUND_FETCH_TIMEOUT = 15

# ==================== FONTS ====================
# Drop NotoNaskhArabic / NotoSansArabic TTF files here, or point VCC_FONTS_DIR elsewhere
FONTS_DIR = os.environ.get('VCC_FONTS_DIR') or os.path.join(os.path.dirname(os.path.dirname(__file__)), 'fonts')
ARABIC_FONTS = (
    ('NotoNaskhArabic', 'NotoNaskhArabic-Regular.ttf'),
    ('NotoSansArabic', 'NotoSansArabic-Regular.ttf'),
)
ARABIC_FONT = None


def register_fonts(fonts_dir: Optional[str] = None) -> bool:
    """Register an Arabic font for right-to-left remarks, if one is installed"""
    global ARABIC_FONT

    fonts_dir = fonts_dir or FONTS_DIR
    for font_name, font_file in ARABIC_FONTS:
        path = os.path.join(fonts_dir, font_file)
        if not os.path.exists(path) or os.path.getsize(path) <= 1000:
            continue
        try:
            pdfmetrics.registerFont(TTFont(font_name, path))
        except Exception as e:
            logger.warning(f"Failed to register {font_name}: {e}")
            continue
        ARABIC_FONT = font_name
        logger.info(f"Arabic remarks font: {font_name}")
        return True
    return False


register_fonts()


# ==================== LAYOUT ====================

@dataclass(frozen=True)
class FieldLayout:
    x: float
    y: float
    max_width: Optional[float] = None
    align: str = 'left'


def anchored(right: float, box: float) -> float:
    """Left edge of a box whose right side sits `right` points from the page edge"""
    return PAGE_WIDTH - right - box


FIELD_LAYOUT = {
    'vcc_no':            FieldLayout(23 + 105, 106, 105, 'right'),
    'generation_date':   FieldLayout(PAGE_WIDTH - 80, 106, None, 'right'),
    'brand_model_type':  FieldLayout(anchored(147, 194), 147, 194),
    'year_of_built':     FieldLayout(anchored(100, 240), 222, 240),
    'country_of_origin': FieldLayout(anchored(100, 240), 261, 240),
    'chassis_no':        FieldLayout(anchored(100, 240), 309, 240),
    'vehicle_color':     FieldLayout(anchored(100, 240), 348, 240),
    'engine_number':     FieldLayout(anchored(100, 240), 389, 240),
    'engine_capacity':   FieldLayout(anchored(433, 245), 220, 245, 'right'),
    'carriage_capacity': FieldLayout(anchored(502, 215), 265, 215),
    'owner':             FieldLayout(anchored(502, 215), 299.5, 215),
    'declaration':       FieldLayout(anchored(502, 215), 352.5, 215),
}

# drawn only when the record has a value
CONDITIONAL_FIELDS = ('engine_capacity', 'carriage_capacity')

REMARKS_RTL = FieldLayout(PAGE_WIDTH - REMARKS_RIGHT - REMARKS_MARGIN, REMARKS_Y, REMARKS_WIDTH, 'right')
REMARKS_LTR = FieldLayout(anchored(REMARKS_RIGHT, REMARKS_WIDTH), REMARKS_Y, REMARKS_WIDTH, 'left')


def field_texts(vehicle: VehicleRecord) -> dict:
    """Text content of every fixed field, keyed like FIELD_LAYOUT"""
    year = vehicle.year_of_built or ''
    return {
        'vcc_no': vehicle.vcc_no or '',
        'generation_date': format_date_dmy(vehicle.vcc_generation_date),
        'brand_model_type': f"{vehicle.vehicle_brand_name} - {vehicle.vehicle_model} ({vehicle.vehicle_type})",
        'year_of_built': f"{year} - {spell_digits(year)}",
        'country_of_origin': vehicle.country_of_origin or '',
        'chassis_no': vehicle.chassis_no or '',
        'vehicle_color': vehicle.vehicle_color or '',
        'engine_number': vehicle.engine_number or '',
        'engine_capacity': vehicle.engine_capacity or '',
        'carriage_capacity': vehicle.carriage_capacity or '',
        'owner': f"{vehicle.owner_code or ''}\n{vehicle.owner_name or ''}",
        'declaration': f"{vehicle.declaration_number} - {format_date_dmy(vehicle.declaration_date)}",
    }


def remarks_layout(remarks: str) -> FieldLayout:
    """Mostly-Arabic remarks hang from the right edge of the box, anything else from the left"""
    return REMARKS_RTL if is_predominantly_rtl(remarks) else REMARKS_LTR


def wrap_lines(text: str, font_name: str, font_size: float, max_width: Optional[float]) -> list:
    if max_width:
        return simpleSplit(text, font_name, font_size, max_width)
    return text.split('\n')


def draw_field(c, text: str, layout: FieldLayout, font_name: str = FONT_NAME, font_size: float = FONT_SIZE):
    """Draw text at a top-left based position, wrapped to the layout width"""
    if not text or not text.strip():
        return
    c.setFont(font_name, font_size)
    leading = font_size * LINE_HEIGHT_FACTOR
    for i, line in enumerate(wrap_lines(text, font_name, font_size, layout.max_width)):
        y = PAGE_HEIGHT - (layout.y + i * leading)
        if layout.align == 'right':
            c.drawRightString(layout.x, y, line)
        else:
            c.drawString(layout.x, y, line)


def draw_remarks(c, remarks: str):
    """Print remarks, using the Arabic font for right-to-left text when one is registered"""
    if not remarks:
        return
    layout = remarks_layout(remarks)
    font_name = ARABIC_FONT if (ARABIC_FONT and layout is REMARKS_RTL) else FONT_NAME
    draw_field(c, remarks, layout, font_name=font_name)


# ==================== IMAGES ====================

def decode_data_url(data_url: str) -> bytes:
    """Decode a base64 data URL (or a bare base64 string)"""
    if ',' in data_url:
        data_url = data_url.split(',', 1)[1]
    return base64.b64decode(data_url)


def read_background_source(source: str) -> str:
    """Return the backgroundImage data URL from a local JSON file or an http(s) resource"""
    source = str(source)
    if source.startswith(('http://', 'https://')):
        response = requests.get(source, timeout=BACKGROUND_FETCH_TIMEOUT)
        response.raise_for_status()
        data = response.json()
    else:
        with open(source, encoding='utf-8') as fh:
            data = json.load(fh)
    return (data or {}).get('backgroundImage') or ''


async def load_background(source: Optional[str] = None) -> Optional[ImageReader]:
    """
    Load the card background. Never raises: a missing, unreachable or
    placeholder asset just means the certificate is printed without it.
    """
    source = source or os.environ.get('VCC_BACKGROUND_SOURCE') or DEFAULT_BACKGROUND_SOURCE
    try:
        data_url = await asyncio.to_thread(read_background_source, source)
        if not data_url or data_url == BACKGROUND_PLACEHOLDER:
            logger.info(f"No background image configured at {source}")
            return None
        image = ImageReader(io.BytesIO(decode_data_url(data_url)))
        image.getSize()
        return image
    except Exception as e:
        logger.warning(f"Could not load background image from {source}: {e}")
        return None


def make_qr_png(data: str) -> bytes:
    """QR code with black modules on a transparent background, one module of margin"""
    qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_M, border=1)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="transparent")
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


def make_qr_image(data: str) -> ImageReader:
    return ImageReader(io.BytesIO(make_qr_png(data)))


def public_vehicle_url(origin: str, vehicle_id) -> str:
    return f"{origin.rstrip('/')}/public/vehicle/{vehicle_id}"


def certificate_filename(vehicle: VehicleRecord) -> str:
    return f"VCC_{vehicle.vcc_no}.pdf"


# ==================== RENDERING ====================

@dataclass(frozen=True)
class CertificateFile:
    filename: str
    content: bytes
    media_type: str = 'application/pdf'


@dataclass(frozen=True)
class RenderResult:
    document: Optional[bytes] = None
    error: Optional[BaseException] = None


def draw_certificate(vehicle: VehicleRecord, background: Optional[ImageReader], qr_image: ImageReader) -> bytes:
    """Lay the certificate out on a fresh canvas and return the PDF bytes"""
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=(PAGE_WIDTH, PAGE_HEIGHT))
    c.setTitle(f"VCC {vehicle.vcc_no}")

    if background is not None:
        c.drawImage(background, 0, 0, width=PAGE_WIDTH, height=PAGE_HEIGHT)

    c.drawImage(qr_image, QR_X, PAGE_HEIGHT - QR_Y - QR_SIZE, width=QR_SIZE, height=QR_SIZE, mask='auto')

    c.setFont(FONT_NAME, FONT_SIZE)
    c.setFillColorRGB(0, 0, 0)

    texts = field_texts(vehicle)
    for name, layout in FIELD_LAYOUT.items():
        if name in CONDITIONAL_FIELDS and not texts[name]:
            continue
        draw_field(c, texts[name], layout)

    draw_remarks(c, vehicle.print_remarks or '')

    c.showPage()
    c.save()
    return buffer.getvalue()


async def render_certificate(
    vehicle: VehicleRecord,
    origin: str,
    background_source: Optional[str] = None,
) -> RenderResult:
    """Shared routine behind both output modes - failures come back in the result"""
    try:
        background, qr_image = await asyncio.gather(
            load_background(background_source),
            asyncio.to_thread(make_qr_image, public_vehicle_url(origin, vehicle.id)),
        )
        document = await asyncio.to_thread(draw_certificate, vehicle, background, qr_image)
        return RenderResult(document=document)
    except Exception as e:
        return RenderResult(error=e)


async def render(
    vehicle: VehicleRecord,
    mode: str,
    origin: str,
    *,
    background_source: Optional[str] = None,
) -> Union[CertificateFile, bytes, None]:
    """
    Render a VCC certificate.

    Args:
        vehicle: the record to print
        mode: 'file' for a named download, 'blob' for in-memory preview bytes
        origin: public origin used to build the QR link
        background_source: JSON file path or URL holding `backgroundImage`

    Returns:
        'file': CertificateFile named VCC_<vccNo>.pdf. Errors propagate.
        'blob': PDF bytes, or None when anything went wrong.
    """
    if mode not in MODES:
        raise ValueError(f"Unknown render mode: {mode}")

    result = await render_certificate(vehicle, origin, background_source)

    if mode == 'file':
        if result.error is not None:
            raise result.error
        return CertificateFile(filename=certificate_filename(vehicle), content=result.document)

    if result.error is not None:
        logger.error(f"Error generating VCC preview for {vehicle.vcc_no}: {result.error}", exc_info=result.error)
        return None
    return result.document
