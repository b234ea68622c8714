import ast
from enum import Enum
from pathlib import Path
from typing import List

import matplotlib.pyplot as plt
import typer
from tqdm import tqdm

from treerings.utils import format_count, format_time, time_function_call
from treerings.view import RingsView, ViewParameters


class ImageFormat(str, Enum):
    png = 'png'
    svg = 'svg'


def load_syntax_tree(path: Path) -> ast.Module:
    return ast.parse(path.read_text(encoding='utf-8'), filename=str(path))


def main(
        sources: List[Path],
        output_directory: Path = Path('.'),
        width: int = 800,
        height: int = 600,
        margin: int = 50,
        image_format: ImageFormat = ImageFormat.png,
        interactive: bool = False,
        continue_on_error: bool = False,
        verbose: bool = False
):
    parameters = ViewParameters(viewport_width=width, viewport_height=height, margin=margin)

    if interactive:
        if len(sources) != 1:
            raise typer.BadParameter('Interactive mode takes exactly one source file.')
        view = RingsView(parameters, verbose=verbose)

        def report_hover(source_ref):
            node = view.resolve(source_ref)
            if node is not None:
                line = getattr(node, 'lineno', None)
                print(f'{type(node).__name__} at line {line}' if line else type(node).__name__)

        view.set_hover_listener(report_hover)
        view.set_tree(load_syntax_tree(sources[0]))
        view.show()
        return

    output_directory.mkdir(parents=True, exist_ok=True)
    for source in tqdm(sources, disable=len(sources) < 2):
        try:
            view = RingsView(parameters, verbose=verbose)
            tree, time_elapsed = time_function_call(view.set_tree, load_syntax_tree(source))
            out_path = output_directory / f'{source.stem}.{image_format.value}'
            view.save(out_path, format=image_format.value)
            plt.close(view.figure)
            if verbose:
                print(f'{source}: {format_count(len(tree))} nodes laid out in '
                      f'{format_time(time_elapsed)}, saved to {out_path}.')
        except (OSError, SyntaxError, UnicodeDecodeError) as e:
            if continue_on_error:
                print(f'Failed to render {source}.')
                print(f'Error: {e}')
            else:
                raise e


if __name__ == '__main__':
    typer.run(main)
