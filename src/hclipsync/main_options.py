"""Click option helpers for mutual exclusivity."""
import click


def _check_mutual_exclusion(name: str, exclusive_with: list[str], opts: dict) -> None:
    """Raise UsageError if mutually exclusive options are both present.

    Args:
        name: Name of the current option.
        exclusive_with: Option names that cannot be combined with it.
        opts: Dictionary of parsed options.

    Raises:
        click.UsageError: If both options are present.
    """
    for other in exclusive_with:
        if opts.get(other):
            msg = f"Options --{name} and --{other} are mutually exclusive"
            raise click.UsageError(msg)


class MutuallyExclusiveOption(click.Option):
    """Click flag that cannot be combined with the listed other flags."""

    def __init__(self, *args, **kwargs):
        """Initialize with exclusive_with parameter listing conflicting flags."""
        self.exclusive_with = kwargs.pop("exclusive_with", [])
        super().__init__(*args, **kwargs)

    def handle_parse_result(self, ctx, opts, args):
        """Check mutual exclusion before the value is stored."""
        if opts.get(self.name):
            _check_mutual_exclusion(self.name, self.exclusive_with, opts)
        return super().handle_parse_result(ctx, opts, args)
