"""Command-line interface for the night action resolution engine."""

from __future__ import annotations

import logging

import click
import yaml

from wolfgm.engine.errors import ActionConstructionError, ActionRejectedError

logger = logging.getLogger(__name__)


@click.group()
@click.option("--log-level", default="WARNING", help="Logging level.")
def cli(log_level: str) -> None:
    """wolfgm -- werewolf game-master night resolution engine."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


# ------------------------------------------------------------------
# wolfgm resolve
# ------------------------------------------------------------------


@cli.command()
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=False),
    help="Path to game config YAML (players and regulations).",
)
@click.option(
    "--actions",
    "actions_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a YAML list of night actions.",
)
@click.option("--turn", type=int, default=1, show_default=True, help="Night to resolve.")
@click.option(
    "--ban-consecutive-guard",
    is_flag=True,
    help="Forbid guarding the same player two nights in a row.",
)
def resolve(
    config_path: str | None,
    actions_path: str,
    turn: int,
    ban_consecutive_guard: bool,
) -> None:
    """Register scripted actions and resolve one night."""
    from wolfgm.config.loader import load_config, load_night_script, merge_configs
    from wolfgm.engine.game import Game

    config = load_config(config_path)
    if ban_consecutive_guard:
        config = merge_configs(
            config, {"regulations": {"allow_consecutive_guard": False}}
        )

    try:
        submissions = load_night_script(actions_path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise click.ClickException(f"Cannot read night script: {exc}") from exc

    try:
        game = Game(config)
    except KeyError as exc:
        raise click.ClickException(f"Invalid game config: {exc}") from exc

    click.echo(click.style(f"=== {config.game_name}: night {turn} ===", fg="cyan", bold=True))

    for submission in submissions:
        try:
            action = game.submit(submission)
        except ActionRejectedError as exc:
            click.echo(
                click.style("  rejected ", fg="red")
                + f"{submission.action_type} {submission.actor}->{submission.target}: "
                + f"{exc.kind.value} ({exc.message})"
            )
            continue
        except ActionConstructionError as exc:
            click.echo(click.style("  invalid  ", fg="red") + str(exc))
            continue
        click.echo(click.style("  accepted ", fg="green") + str(action))

    executed = game.resolve_night(turn)

    click.echo()
    click.echo(click.style("Results:", fg="cyan"))
    for action in sorted(
        game.actions.get_registered_actions(turn=turn), key=lambda a: -a.priority
    ):
        if action.executed:
            status = click.style("executed ", fg="green")
            detail = _format_result(action.result)
        elif action.cancelled:
            status = click.style("cancelled", fg="yellow")
            detail = ""
        else:
            status = click.style("failed   ", fg="red")
            detail = ""
        click.echo(
            f"  [{action.priority:>3}] {status} {action.action_type} "
            f"{action.actor_id}->{action.target_id} {detail}".rstrip()
        )

    click.echo()
    deaths = game.deaths_on(turn)
    if deaths:
        for player in deaths:
            click.echo(
                click.style("  died: ", fg="red")
                + f"{player.name} ({player.player_id}) by {player.death_cause}"
            )
    else:
        click.echo("  Nobody died.")
    click.echo(f"  Executed {executed} action(s).")


# ------------------------------------------------------------------
# wolfgm types
# ------------------------------------------------------------------


@cli.command(name="types")
def list_types() -> None:
    """List registered action types by resolution priority."""
    from wolfgm.engine.action_types import ActionTypeRegistry

    for name in ActionTypeRegistry.names():
        info = ActionTypeRegistry.get_info(name)
        click.echo(
            f"  {info.priority:>3}  {info.name:<12} {info.display_name} "
            f"({info.phase.value})"
        )


def _format_result(result: dict | None) -> str:
    if not result:
        return ""
    return " ".join(
        f"{key}={value}"
        for key, value in result.items()
        if key not in ("target_id", "target_name")
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
