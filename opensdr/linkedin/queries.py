"""
Relationship queries. Each variant maps to exactly one people-search URL
and one screenshot name.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from opensdr.linkedin.urls import people_search_url, slugify


class Degree(str, Enum):
    FIRST = "first"
    SECOND = "second"

    @property
    def network_code(self) -> str:
        # LinkedIn's network facet: "F" for first degree, "S" for second
        return "F" if self is Degree.FIRST else "S"


@dataclass(frozen=True)
class ByCompany:
    company_name: str
    degree: Degree = Degree.FIRST

    def search_url(self) -> str:
        return people_search_url(self.company_name, Degree(self.degree).network_code)

    def screenshot_name(self) -> str:
        return f"{slugify(self.company_name)}_connections"


@dataclass(frozen=True)
class ByPerson:
    person_name: str
    company_name: Optional[str] = None

    @property
    def keywords(self) -> str:
        if self.company_name:
            return f"{self.company_name} {self.person_name}"
        return self.person_name

    def search_url(self) -> str:
        return people_search_url(self.keywords)

    def screenshot_name(self) -> str:
        return f"{slugify(self.keywords)}_person"


@dataclass(frozen=True)
class MutualsOf:
    person_name: str
    company_name: Optional[str] = None

    def person_query(self) -> ByPerson:
        return ByPerson(self.person_name, self.company_name)

    def search_url(self) -> str:
        # The person is located first; the mutuals URL is read off their profile.
        return self.person_query().search_url()

    def screenshot_name(self) -> str:
        return f"{slugify(self.person_name)}_mutual_connections"


RelationshipQuery = Union[ByCompany, ByPerson, MutualsOf]
