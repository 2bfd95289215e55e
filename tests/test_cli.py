from __future__ import annotations

from PIL import Image

import tvg_dump
import tvg_to_png

from tvg_bytes import END, RED, document, full_rect, header, rgba8_table

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _write_sample(tmp_path, blob: bytes | None = None):
    path = tmp_path / "sample.tvg"
    path.write_bytes(document(full_rect()) if blob is None else blob)
    return path


def test_png_defaults_to_input_suffix(tmp_path, capsys) -> None:
    source = _write_sample(tmp_path)
    assert tvg_to_png.main([str(source)]) == 0

    output = tmp_path / "sample.png"
    assert output.read_bytes().startswith(PNG_SIGNATURE)
    out = capsys.readouterr().out
    assert "[+] Loaded" in out
    assert "[+] PNG written to" in out


def test_png_with_size_svg_and_trace(tmp_path) -> None:
    source = _write_sample(tmp_path)
    png_path = tmp_path / "out" / "image.png"
    svg_path = tmp_path / "out" / "image.svg"
    trace_path = tmp_path / "out" / "trace.txt"
    argv = [
        str(source),
        "-o", str(png_path),
        "--width", "32",
        "--supersample", "2",
        "--svg", str(svg_path),
        "--trace-log", str(trace_path),
    ]
    assert tvg_to_png.main(argv) == 0

    with Image.open(png_path) as image:
        assert image.size == (32, 32)
    assert "<svg" in svg_path.read_text(encoding="utf-8")
    assert "fill_rectangles" in trace_path.read_text(encoding="utf-8")


def test_malformed_input_exits_with_error(tmp_path, capsys) -> None:
    source = _write_sample(tmp_path, b"\x72\x56\x09")
    assert tvg_to_png.main([str(source)]) == 1
    assert "[error]" in capsys.readouterr().err
    assert not (tmp_path / "sample.png").exists()


def test_missing_input_exits_with_error(tmp_path, capsys) -> None:
    assert tvg_to_png.main([str(tmp_path / "missing.tvg")]) == 1
    assert "[error]" in capsys.readouterr().err


def test_max_count_is_enforced(tmp_path, capsys) -> None:
    source = _write_sample(tmp_path)
    assert tvg_to_png.main([str(source), "--max-count", "0"]) == 1
    assert "exceeds the limit" in capsys.readouterr().err


def test_invalid_tolerance_is_reported(tmp_path, capsys) -> None:
    source = _write_sample(tmp_path)
    assert tvg_to_png.main([str(source), "--tolerance", "0"]) == 1
    assert "tolerance" in capsys.readouterr().err


def test_trace_is_written_even_when_decoding_fails(tmp_path) -> None:
    blob = document(full_rect())[:-3]
    source = _write_sample(tmp_path, blob)
    trace_path = tmp_path / "trace.txt"
    assert tvg_to_png.main([str(source), "--trace-log", str(trace_path)]) == 1
    assert "header" in trace_path.read_text(encoding="utf-8")


def test_directory_input_renders_every_file(tmp_path, capsys) -> None:
    source_dir = tmp_path / "icons"
    source_dir.mkdir()
    (source_dir / "a.tvg").write_bytes(document(full_rect()))
    (source_dir / "b.tvg").write_bytes(document(full_rect(), width=8, height=8))
    (source_dir / "notes.md").write_text("not an image", encoding="utf-8")
    assert tvg_to_png.main([str(source_dir), "--dump-text"]) == 0

    for stem in ("a", "b"):
        assert (source_dir / f"{stem}.png").read_bytes().startswith(PNG_SIGNATURE)
        assert (source_dir / f"{stem}.txt").read_text(encoding="utf-8").startswith("(tvg 1")
    assert not (source_dir / "notes.png").exists()
    assert "[+] Rendered 2 of 2 files" in capsys.readouterr().out


def test_several_inputs_go_to_the_output_directory(tmp_path) -> None:
    first = tmp_path / "first.tvg"
    second = tmp_path / "second.tvg"
    first.write_bytes(document(full_rect()))
    second.write_bytes(document(full_rect()))
    out_dir = tmp_path / "rendered"
    assert tvg_to_png.main([str(first), str(second), "-o", str(out_dir)]) == 0
    with Image.open(out_dir / "first.png") as image:
        assert image.size == (16, 16)
    assert (out_dir / "second.png").exists()
    assert not (out_dir / "first.txt").exists()


def test_batch_keeps_going_after_a_bad_file(tmp_path, capsys) -> None:
    good = tmp_path / "good.tvg"
    bad = tmp_path / "bad.tvg"
    good.write_bytes(document(full_rect()))
    bad.write_bytes(b"\x72\x56\x09")
    assert tvg_to_png.main([str(bad), str(good)]) == 1
    assert (tmp_path / "good.png").exists()
    assert not (tmp_path / "bad.png").exists()
    err = capsys.readouterr().err
    assert "[error]" in err and "bad.tvg" in err


def test_batch_rejects_single_file_options(tmp_path, capsys) -> None:
    source = _write_sample(tmp_path)
    assert tvg_to_png.main([str(tmp_path), "--svg", str(tmp_path / "x.svg")]) == 1
    assert "single input" in capsys.readouterr().err
    assert not source.with_suffix(".png").exists()


def test_empty_directory_is_an_error(tmp_path, capsys) -> None:
    assert tvg_to_png.main([str(tmp_path)]) == 1
    assert "no .tvg files" in capsys.readouterr().err


def test_dump_text_beside_a_single_png(tmp_path) -> None:
    source = _write_sample(tmp_path)
    png_path = tmp_path / "out" / "image.png"
    assert tvg_to_png.main([str(source), "-o", str(png_path), "--dump-text"]) == 0
    assert "fill_rectangles" in (tmp_path / "out" / "image.txt").read_text(encoding="utf-8")


def test_oversized_header_is_refused(tmp_path, capsys) -> None:
    source = _write_sample(tmp_path, header(100000, 100000, coord_range=2) + rgba8_table([RED]) + END)
    assert tvg_to_png.main([str(source)]) == 1
    assert "limit is" in capsys.readouterr().err
    assert not (tmp_path / "sample.png").exists()


def test_max_pixels_option(tmp_path, capsys) -> None:
    source = _write_sample(tmp_path)
    assert tvg_to_png.main([str(source), "--max-pixels", "100"]) == 1
    assert "limit is 100" in capsys.readouterr().err
    assert tvg_to_png.main([str(source), "--width", "64", "--max-pixels", "0"]) == 0


def test_dump_prints_text(tmp_path, capsys) -> None:
    source = _write_sample(tmp_path)
    assert tvg_dump.main([str(source)]) == 0
    out = capsys.readouterr().out
    assert out.startswith("(tvg 1\n")
    assert "fill_rectangles" in out


def test_dump_to_file(tmp_path) -> None:
    source = _write_sample(tmp_path)
    destination = tmp_path / "dump" / "sample.txt"
    assert tvg_dump.main([str(source), "-o", str(destination)]) == 0
    assert destination.read_text(encoding="utf-8").startswith("(tvg 1")


def test_dump_reports_errors(tmp_path, capsys) -> None:
    source = _write_sample(tmp_path, b"not a tinyvg file")
    assert tvg_dump.main([str(source)]) == 1
    assert "[error]" in capsys.readouterr().err
