import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402
import typer  # noqa: E402

from treerings.render_cli import ImageFormat, main  # noqa: E402


def write_sources(directory):
    first = directory / "first.py"
    first.write_text("import os\n\nprint(os.getcwd())\n")
    second = directory / "second.py"
    second.write_text("class A:\n    def f(self):\n        return [i * i for i in range(3)]\n")
    return [first, second]


def test_renders_one_image_per_source(tmp_path):
    sources = write_sources(tmp_path)
    output_directory = tmp_path / "out"

    main(sources, output_directory, image_format=ImageFormat.svg, verbose=True)

    assert sorted(p.name for p in output_directory.iterdir()) == ["first.svg", "second.svg"]


def test_syntax_errors_can_be_skipped(tmp_path):
    broken = tmp_path / "broken.py"
    broken.write_text("def (:\n")
    sources = write_sources(tmp_path) + [broken]
    output_directory = tmp_path / "out"

    with pytest.raises(SyntaxError):
        main(sources, output_directory)

    main(sources, output_directory, continue_on_error=True)
    assert sorted(p.name for p in output_directory.iterdir()) == ["first.png", "second.png"]


def test_interactive_mode_writes_nothing(tmp_path):
    sources = write_sources(tmp_path)
    unused = tmp_path / "unused"

    main(sources[:1], unused, interactive=True)
    plt.close("all")
    assert not unused.exists()


def test_interactive_mode_takes_one_source(tmp_path):
    with pytest.raises(typer.BadParameter):
        main(write_sources(tmp_path), interactive=True)
