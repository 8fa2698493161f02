import logging
import os
import sys
from typing import Any

import yaml

import click
from pocheck import checker
from pocheck.errors import PocheckError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "logging": {
        "level": "WARNING",
        "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    },
    "catalog_tool": {"executable": "msgcat"},
}
MAX_EXIT_STATUS = 255


def load_config(config_folder: str) -> dict[str, Any]:
    config_folder_path = os.path.abspath(config_folder)
    config_file_path = os.path.abspath(f"{config_folder_path}/config.yml")

    config: dict[str, Any] = {}
    try:
        with open(config_file_path, "r") as file:
            config = yaml.safe_load(file) or {}
    except FileNotFoundError:
        logger.warning(f"Config file {config_file_path} not found, using defaults.")
    except yaml.YAMLError as exc:
        logger.error(sys._getframe().f_code.co_name + " " + str(exc))
        sys.exit(1)

    return {
        section: {**defaults, **(config.get(section) or {})}
        for section, defaults in DEFAULT_CONFIG.items()
    }


@click.group()
@click.version_option()
def cli() -> None:
    pass


@cli.command("check")
@click.argument("po_files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--config-folder", default="config", help="Configuration folder path.")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Show references, key and translation for every problem.",
)
@click.option("--no-color", is_flag=True, help="Disable colored output.")
@click.version_option()
def check(po_files: tuple[str, ...], config_folder: str, verbose: bool, no_color: bool) -> None:
    # Set and non-empty means on.
    verbose = verbose or bool(os.environ.get("VERBOSE"))
    no_color = no_color or bool(os.environ.get("NOCOLOR"))
    config = load_config(config_folder)

    logging.basicConfig(
        level=logging.getLevelName(config["logging"]["level"]),
        format=config["logging"]["format"],
        datefmt=config["logging"]["datefmt"],
    )

    total = 0
    for po_file in po_files:
        try:
            total += checker.run(
                po_file=po_file,
                verbose=verbose,
                color=not no_color,
                executable=config["catalog_tool"]["executable"],
            )
        except PocheckError as exc:
            logger.error(str(exc))
            sys.exit(1)

    sys.exit(min(total, MAX_EXIT_STATUS))
