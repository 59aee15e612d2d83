"""
VCC certificate renderer
Layout positions, background/QR handling and the two output modes
"""
import asyncio
import base64
import io
import json
import os
import shutil

import pytest
from PIL import Image
from PyPDF2 import PdfReader
import reportlab

from utils import vcc_pdf
from utils.vcc_pdf import (
    FIELD_LAYOUT,
    REMARKS_LTR,
    REMARKS_RTL,
    PAGE_HEIGHT,
    CertificateFile,
    draw_field,
    draw_remarks,
    field_texts,
    remarks_layout,
    render,
)

ORIGIN = "https://vcc.example.com"
MISSING_BACKGROUND = "/nonexistent/background-image.json"


class RecordingCanvas:
    """Stands in for a ReportLab canvas and remembers every text draw"""

    def __init__(self):
        self.calls = []
        self.font = None

    def setFont(self, name, size):
        self.font = (name, size)

    def drawString(self, x, y, text):
        self.calls.append(("left", x, y, text, self.font))

    def drawRightString(self, x, y, text):
        self.calls.append(("right", x, y, text, self.font))


def pdf_text(content: bytes) -> str:
    reader = PdfReader(io.BytesIO(content))
    return "\n".join(page.extract_text() for page in reader.pages)


def write_background(tmp_path, data_url: str) -> str:
    path = tmp_path / "background-image.json"
    path.write_text(json.dumps({"backgroundImage": data_url}), encoding="utf-8")
    return str(path)


def jpeg_data_url() -> str:
    buffer = io.BytesIO()
    Image.new("RGB", (75, 55), (230, 220, 200)).save(buffer, format="JPEG")
    return "data:image/jpeg;base64," + base64.b64encode(buffer.getvalue()).decode()


class TestLayoutTable:

    def test_right_anchored_positions(self):
        assert FIELD_LAYOUT["vcc_no"].x == 128
        assert FIELD_LAYOUT["generation_date"].x == 670
        assert FIELD_LAYOUT["brand_model_type"].x == 409
        assert FIELD_LAYOUT["chassis_no"].x == 410
        assert FIELD_LAYOUT["engine_capacity"].x == 72
        assert FIELD_LAYOUT["owner"].x == 33

    def test_alignment_and_widths(self):
        assert FIELD_LAYOUT["vcc_no"].align == "right"
        assert FIELD_LAYOUT["vcc_no"].max_width == 105
        assert FIELD_LAYOUT["generation_date"].max_width is None
        assert FIELD_LAYOUT["engine_capacity"].align == "right"
        assert FIELD_LAYOUT["declaration"].y == 352.5
        assert FIELD_LAYOUT["owner"].y == 299.5

    def test_remarks_boxes(self):
        assert REMARKS_RTL.x == 683 and REMARKS_RTL.align == "right"
        assert REMARKS_LTR.x == 393 and REMARKS_LTR.align == "left"
        assert REMARKS_RTL.y == REMARKS_LTR.y == 458
        assert REMARKS_RTL.max_width == REMARKS_LTR.max_width == vcc_pdf.REMARKS_WIDTH == 295
        assert REMARKS_LTR.x + REMARKS_LTR.max_width == 688


class TestFieldTexts:

    def test_combined_fields(self, vehicle):
        texts = field_texts(vehicle)
        assert texts["year_of_built"] == "2021 - TWO ZERO TWO ONE"
        assert texts["brand_model_type"] == "TOYOTA - LAND CRUISER (STATION WAGON)"
        assert texts["generation_date"] == "07/05/2023"
        assert texts["declaration"] == "101-23-004512 - 30/04/2023"
        assert texts["owner"] == "OC-7781\nAL NOOR MOTORS LLC"

    def test_missing_optionals_are_blank(self, bare_vehicle):
        texts = field_texts(bare_vehicle)
        assert texts["engine_number"] == ""
        assert texts["engine_capacity"] == ""
        assert texts["carriage_capacity"] == ""

    def test_dmy_dates_in_record(self, vehicle):
        record = vehicle.model_copy(update={"vcc_generation_date": "07/05/2023"})
        assert field_texts(record)["generation_date"] == "07/05/2023"


class TestDrawField:

    def test_right_aligned_field_converts_to_bottom_origin(self):
        c = RecordingCanvas()
        draw_field(c, "VCC-1", FIELD_LAYOUT["vcc_no"])
        assert c.calls == [("right", 128, PAGE_HEIGHT - 106, "VCC-1", ("Helvetica", 12))]

    def test_explicit_newline_starts_new_line(self):
        c = RecordingCanvas()
        draw_field(c, "OC-7781\nAL NOOR MOTORS LLC", FIELD_LAYOUT["owner"])
        assert [call[3] for call in c.calls] == ["OC-7781", "AL NOOR MOTORS LLC"]
        assert c.calls[0][2] - c.calls[1][2] == pytest.approx(12 * 1.15)
        assert all(call[0] == "left" and call[1] == 33 for call in c.calls)

    def test_long_text_wraps_to_max_width(self):
        c = RecordingCanvas()
        draw_field(c, "WORD " * 40, FIELD_LAYOUT["chassis_no"])
        assert len(c.calls) > 1

    def test_blank_text_draws_nothing(self):
        c = RecordingCanvas()
        draw_field(c, "", FIELD_LAYOUT["engine_number"])
        draw_field(c, "\n", FIELD_LAYOUT["owner"])
        assert c.calls == []

    def test_remarks_direction(self):
        assert remarks_layout("مركبة مستوردة للاستخدام الشخصي") is REMARKS_RTL
        assert remarks_layout("FIRST REGISTRATION") is REMARKS_LTR
        assert remarks_layout("ab سم") is REMARKS_LTR


class TestArabicFont:
    ARABIC_REMARKS = "مركبة مستوردة للاستخدام الشخصي"

    @pytest.fixture
    def fonts_dir(self, tmp_path, monkeypatch):
        # any TrueType font stands in for the Noto file; ReportLab bundles Vera
        vera = os.path.join(os.path.dirname(reportlab.__file__), "fonts", "Vera.ttf")
        if not os.path.exists(vera):
            pytest.skip("ReportLab bundled fonts not installed")
        shutil.copy(vera, tmp_path / "NotoNaskhArabic-Regular.ttf")
        monkeypatch.setattr(vcc_pdf, "ARABIC_FONT", None)
        return str(tmp_path)

    def test_nothing_registered_without_font_files(self, tmp_path, monkeypatch):
        monkeypatch.setattr(vcc_pdf, "ARABIC_FONT", None)
        assert vcc_pdf.register_fonts(str(tmp_path)) is False
        c = RecordingCanvas()
        draw_remarks(c, self.ARABIC_REMARKS)
        assert all(call[4][0] == "Helvetica" for call in c.calls)

    def test_rtl_remarks_use_arabic_font(self, fonts_dir):
        assert vcc_pdf.register_fonts(fonts_dir) is True
        assert vcc_pdf.ARABIC_FONT == "NotoNaskhArabic"
        c = RecordingCanvas()
        draw_remarks(c, self.ARABIC_REMARKS)
        assert c.calls
        assert all(call[0] == "right" and call[4][0] == "NotoNaskhArabic" for call in c.calls)

    def test_ltr_remarks_keep_helvetica(self, fonts_dir):
        vcc_pdf.register_fonts(fonts_dir)
        c = RecordingCanvas()
        draw_remarks(c, "FIRST REGISTRATION")
        assert c.calls == [("left", 393, PAGE_HEIGHT - 458, "FIRST REGISTRATION", ("Helvetica", 12))]

    def test_certificate_renders_with_arabic_font(self, fonts_dir, vehicle):
        vcc_pdf.register_fonts(fonts_dir)
        record = vehicle.model_copy(update={"print_remarks": self.ARABIC_REMARKS})
        content = asyncio.run(render(record, "blob", ORIGIN, background_source=MISSING_BACKGROUND))
        assert content[:4] == b"%PDF"


class TestRemoteBackground:

    def test_fetch_is_bounded_by_timeout(self, monkeypatch):
        seen = {}

        class FakeResponse:
            def raise_for_status(self):
                pass

            def json(self):
                return {"backgroundImage": vcc_pdf.BACKGROUND_PLACEHOLDER}

        def fake_get(url, **kwargs):
            seen["url"] = url
            seen.update(kwargs)
            return FakeResponse()

        monkeypatch.setattr(vcc_pdf.requests, "get", fake_get)
        source = "https://assets.example.com/background-image.json"
        assert vcc_pdf.read_background_source(source) == vcc_pdf.BACKGROUND_PLACEHOLDER
        assert seen == {"url": source, "timeout": vcc_pdf.BACKGROUND_FETCH_TIMEOUT}

    def test_unreachable_host_means_no_background(self, monkeypatch):
        def stalled(url, **kwargs):
            raise vcc_pdf.requests.Timeout("read timed out")

        monkeypatch.setattr(vcc_pdf.requests, "get", stalled)
        assert asyncio.run(vcc_pdf.load_background("https://assets.example.com/bg.json")) is None


class TestBlobMode:

    def test_returns_pdf_bytes(self, vehicle):
        content = asyncio.run(render(vehicle, "blob", ORIGIN, background_source=MISSING_BACKGROUND))
        assert isinstance(content, bytes)
        assert content[:4] == b"%PDF"

    def test_page_is_750_by_550(self, vehicle):
        content = asyncio.run(render(vehicle, "blob", ORIGIN, background_source=MISSING_BACKGROUND))
        page = PdfReader(io.BytesIO(content)).pages[0]
        assert float(page.mediabox.width) == 750
        assert float(page.mediabox.height) == 550

    def test_fields_are_printed(self, vehicle):
        content = asyncio.run(render(vehicle, "blob", ORIGIN, background_source=MISSING_BACKGROUND))
        text = pdf_text(content)
        assert "VCC-2023-0042" in text
        assert "TWO ZERO TWO ONE" in text
        assert "07/05/2023" in text
        assert "4500 CC" in text

    def test_empty_optionals_still_render(self, bare_vehicle):
        content = asyncio.run(render(bare_vehicle, "blob", ORIGIN, background_source=MISSING_BACKGROUND))
        assert content is not None
        text = pdf_text(content)
        assert "4500 CC" not in text
        assert "FIRST REGISTRATION" not in text

    def test_missing_background_is_not_an_error(self, vehicle):
        content = asyncio.run(render(vehicle, "blob", ORIGIN, background_source=MISSING_BACKGROUND))
        assert content is not None

    def test_placeholder_background_is_skipped(self, vehicle, tmp_path):
        source = write_background(tmp_path, vcc_pdf.BACKGROUND_PLACEHOLDER)
        assert asyncio.run(vcc_pdf.load_background(source)) is None
        assert asyncio.run(render(vehicle, "blob", ORIGIN, background_source=source)) is not None

    def test_corrupt_background_is_skipped(self, tmp_path):
        source = write_background(tmp_path, "data:image/jpeg;base64,bm90IGFuIGltYWdl")
        assert asyncio.run(vcc_pdf.load_background(source)) is None

    def test_background_image_is_embedded(self, vehicle, tmp_path):
        source = write_background(tmp_path, jpeg_data_url())
        assert asyncio.run(vcc_pdf.load_background(source)) is not None
        with_bg = asyncio.run(render(vehicle, "blob", ORIGIN, background_source=source))
        without_bg = asyncio.run(render(vehicle, "blob", ORIGIN, background_source=MISSING_BACKGROUND))
        assert len(with_bg) > len(without_bg)

    def test_arabic_remarks_render(self, vehicle):
        record = vehicle.model_copy(update={"print_remarks": "مركبة مستوردة للاستخدام الشخصي"})
        assert asyncio.run(render(record, "blob", ORIGIN, background_source=MISSING_BACKGROUND)) is not None

    def test_qr_failure_returns_none(self, vehicle, monkeypatch):
        def broken_qr(data):
            raise RuntimeError("qr encoder unavailable")

        monkeypatch.setattr(vcc_pdf, "make_qr_image", broken_qr)
        assert asyncio.run(render(vehicle, "blob", ORIGIN, background_source=MISSING_BACKGROUND)) is None


class TestFileMode:

    def test_named_after_vcc_no(self, vehicle):
        certificate = asyncio.run(render(vehicle, "file", ORIGIN, background_source=MISSING_BACKGROUND))
        assert isinstance(certificate, CertificateFile)
        assert certificate.filename == "VCC_VCC-2023-0042.pdf"
        assert certificate.media_type == "application/pdf"
        assert certificate.content[:4] == b"%PDF"

    def test_qr_failure_propagates(self, vehicle, monkeypatch):
        def broken_qr(data):
            raise RuntimeError("qr encoder unavailable")

        monkeypatch.setattr(vcc_pdf, "make_qr_image", broken_qr)
        with pytest.raises(RuntimeError, match="qr encoder unavailable"):
            asyncio.run(render(vehicle, "file", ORIGIN, background_source=MISSING_BACKGROUND))

    def test_unknown_mode(self, vehicle):
        with pytest.raises(ValueError):
            asyncio.run(render(vehicle, "print", ORIGIN))


class TestQrPayload:

    def test_public_url(self):
        assert vcc_pdf.public_vehicle_url("https://vcc.example.com/", "abc") == "https://vcc.example.com/public/vehicle/abc"

    def test_qr_encodes_vehicle_url(self, vehicle, monkeypatch):
        seen = []
        real = vcc_pdf.make_qr_image

        def spy(data):
            seen.append(data)
            return real(data)

        monkeypatch.setattr(vcc_pdf, "make_qr_image", spy)
        asyncio.run(render(vehicle, "blob", ORIGIN, background_source=MISSING_BACKGROUND))
        assert seen == [f"{ORIGIN}/public/vehicle/{vehicle.id}"]

    def test_qr_image_is_transparent(self):
        png = vcc_pdf.make_qr_png("https://vcc.example.com/public/vehicle/1")
        image = Image.open(io.BytesIO(png))
        assert image.mode == "RGBA"
        # one-module quiet zone is fully transparent
        assert image.getpixel((0, 0))[3] == 0

    def test_qr_image_reader(self):
        width, height = vcc_pdf.make_qr_image("https://vcc.example.com/public/vehicle/1").getSize()
        assert width == height > 0
