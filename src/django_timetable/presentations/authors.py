"""Author attribution for presentations.

An author is credited through one of three sources, modelled as a tagged
variant::

    AuthorRef = InternalAuthor | ExternalPresenter | FreeformAuthor

:func:`resolve_author` turns a stored author into a flat
:class:`ResolvedAuthor` once, so callers never chase optional foreign keys.
"""

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from django_timetable.presentations.models import PresentationAuthor


@dataclass(frozen=True, slots=True)
class InternalAuthor:
    """An author with a user account on this site."""

    user_id: int


@dataclass(frozen=True, slots=True)
class ExternalPresenter:
    """An author backed by an external presenter record."""

    presenter_id: int


@dataclass(frozen=True, slots=True)
class FreeformAuthor:
    """An author known only by the name, email, and affiliation typed in."""

    name: str
    email: str
    affiliation: str


AuthorRef = InternalAuthor | ExternalPresenter | FreeformAuthor


@dataclass(frozen=True, slots=True)
class ResolvedAuthor:
    """Flat projection of an author for display."""

    name: str
    email: str
    affiliation: str

    def as_dict(self) -> dict[str, str]:
        """Return the projection as a JSON-serializable dict."""
        return asdict(self)


def resolve_author(author: "PresentationAuthor") -> ResolvedAuthor:
    """Resolve a stored author into its display projection.

    The linked user or presenter wins for every field it fills; blanks fall
    back to the author's own freeform columns.  Related rows are read through
    the author's cached relations, so prefetch ``user`` and ``presenter``
    when resolving many authors.

    Args:
        author: The author row to resolve.

    Returns:
        The flat ``{name, email, affiliation}`` projection.
    """
    ref = author.as_ref()
    name, email, affiliation = author.author_name, author.author_email, author.affiliation

    if isinstance(ref, InternalAuthor):
        user = author.user
        name = user.get_full_name() or name or user.get_username()
        email = user.email or email
    elif isinstance(ref, ExternalPresenter):
        presenter = author.presenter
        name = presenter.name or name
        email = presenter.email or email
        affiliation = presenter.affiliation or affiliation

    return ResolvedAuthor(name=name, email=email, affiliation=affiliation)
