"""Create or update a conference timetable skeleton from a TOML file."""

from collections.abc import Callable
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from django.core.management.base import BaseCommand, CommandError, CommandParser
from django.db import models, transaction

from django_timetable.conference.models import Conference, Section
from django_timetable.conference.services import SectionService
from django_timetable.config_loader import load_conference_config
from django_timetable.presentations.models import Category
from django_timetable.scheduling.exceptions import SchedulingError

# TOML key -> model field. Keys absent from the file leave the model default.
CONFERENCE_FIELDS: dict[str, str] = {
    "name": "name",
    "start": "start_date",
    "end": "end_date",
    "timezone": "timezone",
    "venue": "venue",
}
CATEGORY_FIELDS: dict[str, str] = {"color": "color", "order": "order"}
SECTION_FIELDS: dict[str, str] = {
    "type": "type",
    "room": "room",
    "capacity": "capacity",
    "description": "description",
    "order": "order",
}


def model_values(entry: dict[str, Any], fields: dict[str, str], *, position: int | None = None) -> dict[str, Any]:
    """Pick the model field values out of a TOML table.

    When *position* is given it becomes the ``order`` unless the table sets
    one explicitly.
    """
    values = {field: entry[key] for key, field in fields.items() if key in entry}
    if position is not None:
        values.setdefault("order", position)
    return values


def localize(value: datetime, tz: ZoneInfo) -> datetime:
    """Read a naive TOML local datetime as wall time in *tz*."""
    return value if value.tzinfo is not None else value.replace(tzinfo=tz)


class Command(BaseCommand):
    """Bootstrap the timetable skeleton of a conference.

    The TOML file describes the conference, its presentation categories and
    its sections.  Categories and sections are matched to existing rows by
    name.  Sections are written through :class:`SectionService`, so the Day
    of every section start is created as needed; on ``--update`` persisted
    days are realigned to the new conference dates first.

    Examples::

        manage.py bootstrap_conference --config pycon.toml
        manage.py bootstrap_conference --config pycon.toml --update
        manage.py bootstrap_conference --config pycon.toml --dry-run
    """

    help = "Create or update a conference, its categories and sections from a TOML config file."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("--config", required=True, help="Conference TOML file to load.")
        parser.add_argument(
            "--update",
            action="store_true",
            help="Overwrite an existing conference with the same slug, and its matching categories and sections.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only validate the file and show what it describes.",
        )

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: ARG002
        try:
            conf = load_conference_config(options["config"])
        except (FileNotFoundError, TypeError, ValueError) as exc:
            raise CommandError(str(exc)) from exc

        if options["dry_run"]:
            self.describe(conf)
            return

        update: bool = options["update"]
        self.sections = SectionService()
        try:
            with transaction.atomic():
                conference = self.upsert_conference(conf, update=update)
                tz = ZoneInfo(conference.timezone)
                counts = {
                    "categories": self.upsert_named(
                        Category,
                        conference,
                        conf.get("categories", []),
                        update=update,
                        write=self.write_category,
                    ),
                    "sections": self.upsert_named(
                        Section,
                        conference,
                        conf["sections"],
                        update=update,
                        write=lambda conference, existing, entry, position: self.write_section(
                            conference, existing, entry, position, tz
                        ),
                    ),
                }
        except SchedulingError as exc:
            raise CommandError(str(exc)) from exc

        self.report(conference, counts, options["verbosity"])

    def upsert_conference(self, conf: dict[str, Any], *, update: bool) -> Conference:
        """Create the conference, or overwrite it when ``update`` is set.

        Raises:
            CommandError: If the slug is taken and ``update`` is not set.
        """
        values = model_values(conf, CONFERENCE_FIELDS)
        conference = Conference.objects.filter(slug=conf["slug"]).first()

        if conference is None:
            conference = Conference.objects.create(slug=conf["slug"], **values)
            self.stdout.write(self.style.SUCCESS(f"  Created conference: {conference.name}"))
            return conference
        if not update:
            msg = f"Conference '{conf['slug']}' already exists; pass --update to overwrite it."
            raise CommandError(msg)

        for field, value in values.items():
            setattr(conference, field, value)
        conference.save()
        self.sections.sync_days(conference)
        self.stdout.write(self.style.SUCCESS(f"  Updated conference: {conference.name}"))
        return conference

    def upsert_named(
        self,
        model: type[models.Model],
        conference: Conference,
        entries: list[dict[str, Any]],
        *,
        update: bool,
        write: Callable[[Conference, Any, dict[str, Any], int], models.Model],
    ) -> list[tuple[str, models.Model]]:
        """Write each TOML table through *write*, matching rows by name.

        Existing rows are left alone unless ``update`` is set.

        Returns:
            ``(action, instance)`` pairs, action being ``created`` or ``updated``.
        """
        label = model._meta.verbose_name
        done: list[tuple[str, models.Model]] = []
        for position, entry in enumerate(entries):
            existing = model._default_manager.filter(conference=conference, name=entry["name"]).first()
            if existing is not None and not update:
                self.stdout.write(self.style.WARNING(f"  Skipped existing {label}: {entry['name']}"))
                continue
            action = "created" if existing is None else "updated"
            instance = write(conference, existing, entry, position)
            self.stdout.write(self.style.SUCCESS(f"  {action.capitalize()} {label}: {instance.name}"))
            done.append((action, instance))
        return done

    def write_category(
        self,
        conference: Conference,
        existing: Category | None,
        entry: dict[str, Any],
        position: int,
    ) -> Category:
        values = model_values(entry, CATEGORY_FIELDS, position=position)
        if existing is None:
            return Category.objects.create(conference=conference, name=entry["name"], **values)
        for field, value in values.items():
            setattr(existing, field, value)
        existing.save()
        return existing

    def write_section(
        self,
        conference: Conference,
        existing: Section | None,
        entry: dict[str, Any],
        position: int,
        tz: ZoneInfo,
    ) -> Section:
        values = model_values(entry, SECTION_FIELDS, position=position)
        start_time, end_time = localize(entry["start"], tz), localize(entry["end"], tz)
        if existing is None:
            return self.sections.create_section(
                conference, name=entry["name"], start_time=start_time, end_time=end_time, **values
            )
        for field, value in values.items():
            setattr(existing, field, value)
        existing.save()
        return self.sections.update_section_times(existing, start_time=start_time, end_time=end_time)

    def describe(self, conf: dict[str, Any]) -> None:
        """Print what the file describes without touching the database."""
        heading = self.style.MIGRATE_HEADING
        self.stdout.write(heading("\n[DRY RUN] No database changes will be made.\n"))
        self.stdout.write(heading("Conference:"))
        rows = [
            ("Name", conf["name"]),
            ("Slug", conf["slug"]),
            ("Dates", f"{conf['start']} -- {conf['end']}"),
            ("Timezone", conf["timezone"]),
        ]
        if conf.get("venue"):
            rows.append(("Venue", conf["venue"]))
        for key, value in rows:
            self.stdout.write(f"  {key + ':':<12}{value}")

        categories = conf.get("categories", [])
        if categories:
            self.stdout.write(heading(f"\nCategories ({len(categories)}):"))
            for idx, category in enumerate(categories):
                self.stdout.write(f"  [{idx}] {category['name']} {category.get('color', '')}".rstrip())

        self.stdout.write(heading(f"\nSections ({len(conf['sections'])}):"))
        for idx, section in enumerate(conf["sections"]):
            self.stdout.write(f"  [{idx}] {section['name']} [{section['type']}] {section['start']} -- {section['end']}")

    def report(
        self,
        conference: Conference,
        counts: dict[str, list[tuple[str, models.Model]]],
        verbosity: int,
    ) -> None:
        self.stdout.write(self.style.MIGRATE_HEADING(f"\nBootstrap complete for '{conference.slug}':"))
        for label, done in counts.items():
            created = sum(1 for action, _ in done if action == "created")
            self.stdout.write(f"  {label.capitalize()}: {created} created, {len(done) - created} updated")
            if verbosity >= 2:  # noqa: PLR2004
                for action, instance in done:
                    self.stdout.write(f"    - {instance} ({action})")
        self.stdout.write(f"  Days: {conference.days.count()} persisted")
