#!/usr/bin/env python3
"""
League Pick'em Management CLI

This script provides command-line management functionality for the League Pick'em application.
"""

import logging

import click
from flask.cli import with_appcontext
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from pickem import create_app, db
from pickem.models import Game, GameStatus, League, Pick, Team, User
from pickem.models.game import MAX_WEEK
from pickem.services.standings_service import compute_standings

app = create_app()


@click.group()
def cli():
    """League Pick'em Management CLI"""
    pass


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init")
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error initializing database: {str(e)}")
        logging.error(f"Database init failed: {e}")


@db_cmd.command()
@with_appcontext
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        db.create_all()
        click.echo("✅ Database reset successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error resetting database: {str(e)}")
        logging.error(f"Database reset failed: {e}")


# Team Commands
@cli.group()
def teams():
    """Team commands"""
    pass


@teams.command()
@with_appcontext
def seed():
    """Create the 32 NFL franchises (skips existing ones)"""
    try:
        created = Team.seed_all()
        db.session.commit()
        click.echo(f"✅ Seeded {created} teams ({Team.query.count()} total)")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"❌ Database error seeding teams: {str(e)}")
        logging.error(f"Team seed failed - SQL error: {e}")


# User Management Commands
@cli.group()
def user():
    """User management commands"""
    pass


def _create_user(username, email, password, first_name, last_name, is_admin):
    existing = User.query.filter(
        (User.username == username) | (User.email == email.lower())
    ).first()

    if existing:
        click.echo(
            f"❌ User with username '{username}' or email '{email}' already exists!"
        )
        return None

    new_user = User(
        username=username,
        email=email.lower(),
        first_name=first_name,
        last_name=last_name,
        is_active=True,
        is_admin=is_admin,
    )
    new_user.set_password(password)

    try:
        db.session.add(new_user)
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        click.echo(f"❌ User '{username}' already exists!")
        logging.error(f"User creation failed - integrity error: {e}")
        return None

    return new_user


@user.command()
@click.argument("username")
@click.argument("email")
@click.password_option()
@click.option("--first-name", help="First name")
@click.option("--last-name", help="Last name")
@with_appcontext
def create(username, email, password, first_name, last_name):
    """Create a regular user"""
    created = _create_user(username, email, password, first_name, last_name, False)
    if created:
        click.echo(f"✅ Created user '{username}' ({created.email})")


@user.command()
@click.argument("username")
@click.argument("email")
@click.password_option()
@click.option("--first-name", help="First name")
@click.option("--last-name", help="Last name")
@with_appcontext
def create_admin(username, email, password, first_name, last_name):
    """Create an admin user"""
    created = _create_user(username, email, password, first_name, last_name, True)
    if created:
        click.echo(f"✅ Created admin user '{username}' ({created.email})")


@user.command()
@click.argument("username")
@with_appcontext
def deactivate(username):
    """Deactivate a user (picks and memberships are kept)"""
    target = User.query.filter_by(username=username).first()
    if not target:
        click.echo(f"❌ User '{username}' not found!")
        return

    target.deactivate()
    db.session.commit()
    click.echo(f"✅ Deactivated user '{username}'")


# Game Commands
@cli.group()
def game():
    """Game commands"""
    pass


@game.command()
@click.argument("season_year", type=int)
@click.argument("week", type=click.IntRange(1, MAX_WEEK))
@click.argument("away")
@click.argument("home")
@click.argument("kickoff", type=click.DateTime(formats=["%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M"]))
@click.option("--spread", type=float, help="Home-relative spread (negative = home favored)")
@click.option("--over-under", type=float, help="Total points line")
@with_appcontext
def add(season_year, week, away, home, kickoff, spread, over_under):
    """Schedule a game: AWAY @ HOME, kickoff in UTC"""
    away_team = Team.get_by_abbreviation(away)
    home_team = Team.get_by_abbreviation(home)
    if not away_team or not home_team:
        click.echo(f"❌ Unknown team: {away if not away_team else home}")
        return
    if away_team.id == home_team.id:
        click.echo("❌ A team cannot play itself")
        return

    new_game = Game(
        season_year=season_year,
        week=week,
        away_team_id=away_team.id,
        home_team_id=home_team.id,
        game_time=kickoff,
        spread=spread,
        over_under=over_under,
    )
    db.session.add(new_game)
    db.session.commit()
    click.echo(
        f"✅ Added game {new_game.id}: {away_team.abbreviation} @ {home_team.abbreviation} "
        f"(Week {week}, {kickoff:%Y-%m-%d %H:%M} UTC)"
    )


@game.command()
@click.argument("game_id", type=int)
@click.argument("home_score", type=click.IntRange(min=0))
@click.argument("away_score", type=click.IntRange(min=0))
@click.option(
    "--status",
    type=click.Choice([status.value for status in GameStatus]),
    default=GameStatus.FINAL.value,
    show_default=True,
)
@with_appcontext
def score(game_id, home_score, away_score, status):
    """Record a game's score and refresh pick results"""
    target = db.session.get(Game, game_id)
    if not target:
        click.echo(f"❌ Game {game_id} not found!")
        return

    try:
        target.update_score(home_score, away_score, status)
        db.session.commit()
    except ValueError as e:
        db.session.rollback()
        click.echo(f"❌ {e}")
        return

    graded = Pick.query.filter(
        Pick.game_id == game_id, Pick.is_correct.isnot(None)
    ).count()
    click.echo(
        f"✅ Game {game_id} now {status}: {target.away_team.abbreviation} {away_score} "
        f"@ {target.home_team.abbreviation} {home_score} ({graded} picks graded)"
    )


# League Commands
@cli.group()
def league():
    """League commands"""
    pass


@league.command()
@click.argument("league_id", type=int)
@click.option("--week", type=click.IntRange(1, MAX_WEEK), help="Single week only")
@with_appcontext
def standings(league_id, week):
    """Print a league's standings table"""
    target = db.session.get(League, league_id)
    if not target:
        click.echo(f"❌ League {league_id} not found!")
        return

    rows = compute_standings(target, week)
    scope = f"Week {week}" if week else "Season"
    click.echo(f"🏆 {target.name} - {scope} ({target.scoring_type.value} scoring)")
    click.echo("=" * 56)
    click.echo(f"{'Rank':<6}{'Player':<24}{'Points':>8}{'Correct':>9}{'Win %':>9}")

    for row in rows:
        name = row.user.username if row.user is not None else str(row.user_id)
        click.echo(
            f"{row.rank:<6}{name:<24}{row.total_points:>8}"
            f"{row.correct_picks:>4}/{row.total_picks:<4}{row.win_percentage:>8.1f}"
        )


# Info Commands
@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("🏈 League Pick'em Application Status")
    click.echo("=" * 40)

    # Database connection
    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    user_count = User.query.filter_by(is_active=True).count()
    click.echo(f"👥 Active Users: {user_count}")

    league_count = League.query.filter_by(is_active=True).count()
    click.echo(f"🏆 Active Leagues: {league_count}")

    click.echo(f"🏟️  Teams: {Team.query.count()}")

    game_count = Game.query.count()
    final_count = Game.query.filter_by(status=GameStatus.FINAL).count()
    click.echo(f"🏈 Games: {final_count}/{game_count} completed")


if __name__ == "__main__":
    with app.app_context():
        cli()
