from hypothesis import given
from hypothesis import strategies as st

from projdash.core.project_store import filter_projects
from projdash.models.project import ALL_TYPES, Project, ProjectType

_types = st.sampled_from(list(ProjectType))
_text = st.text(alphabet="abcXYZ019 ", max_size=6)


@st.composite
def _projects(draw: st.DrawFn) -> list[Project]:
    codes = draw(st.lists(st.text(alphabet="0129aB", min_size=1, max_size=4), unique=True, max_size=8))
    return [
        Project(
            id=f"p{index}",
            project_code=code,
            type=draw(_types),
            name=draw(_text),
            checked=draw(st.booleans()),
        )
        for index, code in enumerate(codes)
    ]


_active_types = st.one_of(st.just(ALL_TYPES), st.sampled_from([member.value for member in ProjectType]))


@given(_projects(), _active_types, _text)
def test_filter_is_ordered_subset(projects: list[Project], active_type: str, search: str) -> None:
    result = filter_projects(projects, active_type, search)
    positions = [projects.index(project) for project in result]
    assert positions == sorted(positions)
    assert all(project in projects for project in result)


@given(_projects(), _active_types, _text)
def test_filter_is_idempotent(projects: list[Project], active_type: str, search: str) -> None:
    once = filter_projects(projects, active_type, search)
    assert filter_projects(once, active_type, search) == once


@given(_projects(), _text)
def test_search_matches_any_field_case_insensitively(projects: list[Project], search: str) -> None:
    result = filter_projects(projects, ALL_TYPES, search.upper())
    needle = search.lower()
    expected = [
        project
        for project in projects
        if needle in f"{project.project_code}".lower()
        or needle in project.name.lower()
        or needle in project.type.value.lower()
    ]
    assert result == expected
