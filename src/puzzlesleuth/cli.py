"""CLI entry point for PuzzleSleuth."""

import random

import click
import yaml

from puzzlesleuth.config.settings import Settings, configure_logging
from puzzlesleuth.engine.skills import CognitiveProfile, Tier

TIER_CHOICE = click.Choice([t.value for t in Tier])


def _parse_skills(ctx, param, values):
    data = {}
    for item in values:
        name, sep, raw = item.partition("=")
        if not sep:
            raise click.BadParameter(f"expected name=value, got {item!r}")
        try:
            data[name.strip()] = float(raw)
        except ValueError:
            raise click.BadParameter(f"{raw!r} is not a number") from None
    try:
        return CognitiveProfile.from_dict(data)
    except ValueError as e:
        raise click.BadParameter(str(e)) from None


def _profile_options(func):
    func = click.option("--seed", type=int, default=None, help="Random seed for a reproducible batch")(func)
    func = click.option("--progression", type=int, default=0, show_default=True,
                        help="Completed sessions so far")(func)
    func = click.option("--tier", type=TIER_CHOICE, default=None, help="Player tier")(func)
    func = click.option("--skill", "profile", multiple=True, callback=_parse_skills,
                        help="Skill value as name=value (repeatable); others default to 50")(func)
    return func


def _format_profile(profile: CognitiveProfile) -> str:
    return "  ".join(f"{name}={value:.2f}" for name, value in profile.as_dict().items())


@click.group()
@click.option("--log-level", default=None, help="Override the configured log level")
@click.pass_context
def main(ctx: click.Context, log_level) -> None:
    """PuzzleSleuth: adaptive puzzle selection for young detectives."""
    ctx.ensure_object(dict)
    settings = Settings.load()
    if log_level:
        settings.log_level = log_level
    configure_logging(settings.log_level)
    ctx.obj["settings"] = settings


@main.command()
@click.option("--unsolved", is_flag=True, help="The puzzle was not solved")
@click.option("--time", "time_taken", type=float, required=True, help="Seconds taken")
@click.option("--max-time", type=click.FloatRange(min=0, min_open=True), default=None, help="Reference time ceiling in seconds")
@click.option("--optimal-moves", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--moves", "actual_moves", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--attempts", type=click.IntRange(min=0), default=0, show_default=True)
@click.option("--hints", type=click.IntRange(min=0), default=0, show_default=True)
@click.pass_context
def score(ctx, unsolved, time_taken, max_time, optimal_moves, actual_moves, attempts, hints) -> None:
    """Score a single puzzle attempt."""
    from puzzlesleuth.engine.scoring import PuzzleAttemptResult, score_puzzle_attempt

    settings = ctx.obj["settings"]
    attempt = PuzzleAttemptResult(
        solved=not unsolved,
        time_taken=time_taken,
        max_time=settings.max_time_seconds if max_time is None else max_time,
        optimal_moves=optimal_moves,
        actual_moves=actual_moves,
        attempts_used=attempts,
        hints_used=hints,
    )
    click.echo(f"{score_puzzle_attempt(attempt):.2f}")


@main.command()
@_profile_options
@click.option("--count", type=click.IntRange(min=0), default=None, help="Batch size")
@click.pass_context
def select(ctx, profile, tier, progression, seed, count) -> None:
    """Select the next batch of puzzles for a profile."""
    from puzzlesleuth.engine.selector import select_next_puzzles

    settings = ctx.obj["settings"]
    puzzles = select_next_puzzles(
        profile,
        Tier(tier) if tier else settings.default_tier,
        progression,
        settings.batch_size if count is None else count,
        rng=random.Random(seed),
    )
    for i, p in enumerate(puzzles):
        click.echo(
            f"  {i}: {p.type.value:<9} {p.difficulty.value:<7} "
            f"rating={p.difficulty_rating:5.1f}  moves={p.optimal_moves}"
        )


@main.command()
@_profile_options
@click.pass_context
def state(ctx, profile, tier, progression, seed) -> None:
    """Build the adaptive state and explain each puzzle in the batch."""
    from puzzlesleuth.engine.adaptive import build_adaptive_state
    from puzzlesleuth.engine.insights import explain_puzzle

    settings = ctx.obj["settings"]
    adaptive = build_adaptive_state(
        profile,
        Tier(tier) if tier else settings.default_tier,
        progression,
        count=settings.batch_size,
        rng=random.Random(seed),
    )
    click.echo(f"Profile:   {_format_profile(adaptive.profile)}")
    click.echo(f"Weakest:   {adaptive.weakest_skill.value}")
    click.echo(f"Strongest: {adaptive.strongest_skill.value}")
    for i, p in enumerate(adaptive.next_puzzles):
        insight = explain_puzzle(adaptive, i)
        click.echo(f"  {i}: {p.type.value} ({p.difficulty.value}, {insight.trend.value})")
        for reason in insight.reasons:
            click.echo(f"       - {reason}")


@main.group()
def player() -> None:
    """Inspect or reset stored players."""


@player.command("show")
@click.argument("player_id")
@click.pass_context
def player_show(ctx, player_id) -> None:
    """Show a stored player's profile."""
    from puzzlesleuth.state.progress import ProfileStore

    store = ProfileStore(db_path=ctx.obj["settings"].db_path)
    record = store.get_player(player_id)
    if record is None:
        raise click.ClickException(f"Unknown player: {player_id}")
    click.echo(f"Player:      {record.player_id} ({record.tier.value})")
    click.echo(f"Profile:     {_format_profile(record.profile)}")
    click.echo(f"Progression: {record.session_progression}")
    click.echo(f"Attempts:    {len(store.get_attempts(player_id))}")


@player.command("reset")
@click.argument("player_id")
@click.confirmation_option(prompt="Delete this player's profile and history?")
@click.pass_context
def player_reset(ctx, player_id) -> None:
    """Delete a stored player and their history."""
    from puzzlesleuth.state.progress import ProfileStore

    store = ProfileStore(db_path=ctx.obj["settings"].db_path)
    store.reset_player(player_id)
    click.echo(f"Reset {player_id}")


@main.command()
@click.pass_context
def serve(ctx) -> None:
    """Run the JSON-lines server on stdin/stdout."""
    import asyncio

    from puzzlesleuth.server.__main__ import main as server_main

    asyncio.run(server_main(ctx.obj["settings"]))


@main.command()
@click.pass_context
def config(ctx) -> None:
    """Print the resolved settings."""
    click.echo(yaml.dump(ctx.obj["settings"].model_dump(mode="json"), default_flow_style=False), nl=False)
