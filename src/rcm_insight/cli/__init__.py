"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="rcm-insight",
    help="RCM Insight - Risk-Control Matrix aggregation and export",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .main import main as _main_callback  # noqa: F401, E402
from .summary import summary as _summary  # noqa: F401, E402
from .tree import tree as _tree  # noqa: F401, E402
from .export import export as _export  # noqa: F401, E402
from .validate import validate as _validate  # noqa: F401, E402
