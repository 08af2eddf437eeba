#!/usr/bin/env python3
"""
CLI for organizers and operators of Boundary Live
"""
import logging
import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from app.config import settings
from app.database import init_db, run_migrations, get_session
from app.models import Team, Player, Tournament, TournamentEntrant, EntrantStatus
from app.engine import BracketEngine, StatsAccumulator, ScoringEngine
from app.engine.errors import ScoringError

console = Console()


@click.group()
@click.option("--verbose", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Boundary Live - live cricket scoring and knockout brackets"""
    logging.basicConfig(level="DEBUG" if verbose else settings.LOG_LEVEL)


@cli.command()
def init():
    """Initialize the database"""
    console.print("[yellow]Initializing database...[/yellow]")
    init_db()
    console.print("[green]Database initialized successfully![/green]")


@cli.command()
def migrate():
    """Add phase/winner columns to an existing matches table"""
    added = run_migrations()
    if added:
        console.print(f"[green]Added columns: {', '.join(added)}[/green]")
    else:
        console.print("[yellow]Nothing to migrate[/yellow]")


@cli.command()
@click.option("--name", default="Demo Cup", help="Tournament name")
@click.option("--teams", "team_count", default=5, help="Number of entrant teams")
@click.option("--overs", default=None, type=int, help="Overs per innings")
def seed(name: str, team_count: int, overs: int):
    """Create a tournament with accepted, present entrant teams"""
    init_db()
    session = get_session()
    try:
        tournament = Tournament(name=name, overs_limit=overs)
        session.add(tournament)
        session.flush()

        for i in range(1, team_count + 1):
            team = Team(name=f"Team {i}", short_name=f"T{i}")
            session.add(team)
            session.flush()
            for j in range(1, 12):
                session.add(Player(name=f"T{i} Player {j}", team_id=team.id))
            session.add(TournamentEntrant(
                tournament_id=tournament.id,
                team_id=team.id,
                status=EntrantStatus.ACCEPTED,
                is_present=True,
            ))
        session.commit()
        console.print(f"[green]Created tournament {tournament.id} with {team_count} teams[/green]")
    finally:
        session.close()


@cli.command()
@click.argument("tournament_id", type=int)
def generate_bracket(tournament_id: int):
    """Generate the knockout draw for a tournament"""
    session = get_session()
    try:
        matches = BracketEngine(session).generate_bracket(tournament_id)
        console.print(f"[green]{len(matches)} matches created[/green]")
        _print_bracket(session, tournament_id)
    except ScoringError as e:
        console.print(f"[red]{e.message}[/red]")
    finally:
        session.close()


@cli.command()
@click.argument("tournament_id", type=int)
def show_bracket(tournament_id: int):
    """Show a tournament's bracket, round by round"""
    session = get_session()
    try:
        _print_bracket(session, tournament_id)
    except ScoringError as e:
        console.print(f"[red]{e.message}[/red]")
    finally:
        session.close()


@cli.command()
@click.argument("match_id", type=int)
def scorecard(match_id: int):
    """Refresh and print the player figures for a match"""
    session = get_session()
    try:
        score = ScoringEngine(session).match_score(match_id)
        for innings in score.innings:
            console.print(Panel(
                f"[bold]Innings {innings.innings_number}[/bold]: "
                f"{innings.total_runs}/{innings.total_wickets} ({innings.overs_display} ov) "
                f"RR {innings.run_rate}"
            ))
        if score.target:
            console.print(f"Target: [bold]{score.target}[/bold]")

        rows = StatsAccumulator(session).fold_player_stats(match_id)
        table = Table(title=f"Match {match_id} player figures")
        table.add_column("Player", style="cyan")
        table.add_column("R", justify="right")
        table.add_column("B", justify="right")
        table.add_column("4s", justify="right")
        table.add_column("6s", justify="right")
        table.add_column("SR", justify="right")
        table.add_column("O", justify="right")
        table.add_column("R conc", justify="right")
        table.add_column("W", justify="right", style="green")
        for row in rows:
            table.add_row(
                row.player.name if row.player else str(row.player_id),
                str(row.runs),
                str(row.balls_faced),
                str(row.fours),
                str(row.sixes),
                f"{row.strike_rate:.1f}",
                f"{row.overs_bowled:.1f}",
                str(row.runs_conceded),
                str(row.wickets),
            )
        console.print(table)
    except ScoringError as e:
        console.print(f"[red]{e.message}[/red]")
    finally:
        session.close()


def _print_bracket(session, tournament_id: int):
    bracket = BracketEngine(session).get_bracket(tournament_id)
    if not bracket:
        console.print("[red]No bracket yet. Run 'generate-bracket' first.[/red]")
        return

    table = Table(title=f"Tournament {tournament_id} bracket")
    table.add_column("Round", justify="right")
    table.add_column("#", justify="right")
    table.add_column("Team 1", style="cyan")
    table.add_column("Team 2", style="magenta")
    table.add_column("Winner", style="green")
    table.add_column("Phase")

    for entry in bracket:
        table.add_row(
            str(entry.round),
            str(entry.match_number),
            entry.team1_name or "TBD",
            entry.team2_name or "TBD",
            entry.winner_name or "-",
            entry.phase,
        )
    console.print(table)


if __name__ == "__main__":
    cli()
