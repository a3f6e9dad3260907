from .cli import cli
from .grants import current_role, destroy, import_, run, spec_test

__all__ = ["cli", "current_role", "destroy", "import_", "run", "spec_test"]


def main():
    cli(obj={})
