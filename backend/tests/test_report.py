from __future__ import annotations

import base64
import os
import re
from datetime import date

import pytest

from plantlens.errors import RenderError
from plantlens.services.report import (
    build_report,
    decode_data_url,
    fit_within,
    render_report,
    report_filename,
)

from conftest import compact, make_png, pdf_text, png_data_url


@pytest.mark.parametrize(
    "size, expected",
    [
        ((1000, 300), (500, 150)),
        ((500, 600), (250, 300)),
        ((100, 100), (300, 300)),
    ],
)
def test_fit_within_box(size, expected):
    assert fit_within(*size) == pytest.approx(expected)


def test_decode_data_url_strips_prefix():
    png = make_png()
    encoded = base64.b64encode(png).decode("ascii")

    assert decode_data_url(f"data:image/png;base64,{encoded}") == png
    assert decode_data_url(f"data:image/svg+xml;base64,{encoded}") == png
    assert decode_data_url(encoded) == png


def test_report_filenames_are_unique():
    names = {report_filename() for _ in range(50)}

    assert len(names) == 50
    assert all(re.fullmatch(r"plant_analysis_report_\d{8}_\d{6}_[0-9a-f]{8}\.pdf", n) for n in names)


def test_render_report_contents(tmp_path):
    path = str(tmp_path / "report.pdf")

    render_report(path, "Roots & <stems> look fine.\nWater weekly.", today=date(2026, 10, 19))

    data = open(path, "rb").read()
    assert data.startswith(b"%PDF")
    text = pdf_text(data)
    assert compact("Plant Analysis Report") in text
    assert compact("Date: 10/19/2026") in text
    assert compact("Roots & <stems> look fine.") in text
    assert compact("Water weekly.") in text


def test_render_report_compressed(tmp_path):
    path = str(tmp_path / "report.pdf")

    render_report(path, "Healthy fern", compress=True)

    data = open(path, "rb").read()
    assert b"Healthy fern" not in data
    assert compact("Healthy fern") in pdf_text(data)


def test_build_report_writes_into_reports_dir(tmp_path):
    reports_dir = str(tmp_path / "reports")

    path = build_report("Healthy fern", png_data_url(), reports_dir)

    assert os.path.dirname(path) == reports_dir
    assert os.path.getsize(path) > 0


def test_build_report_failure_removes_partial_file(tmp_path):
    reports_dir = str(tmp_path / "reports")

    with pytest.raises(RenderError) as excinfo:
        build_report("Healthy fern", "data:image/png;base64,bm90IGFuIGltYWdl", reports_dir)

    assert excinfo.value.to_dict() == {"error": "An error occurred while generating the PDF report"}
    assert os.listdir(reports_dir) == []


def test_decode_data_url_rejects_non_string():
    with pytest.raises(ValueError):
        decode_data_url({"src": "fern.png"})
