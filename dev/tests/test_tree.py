"""Tree flattening and repository grouping."""

from data_factory import SAMPLE_REPOSITORIES, SAMPLE_TAGS

from repo_tree.tree import (
    LAST_BRANCH,
    NAMESPACE,
    REPOSITORY,
    TAG,
    flatten_catalog,
    group_repositories,
    split_repository,
)


def _sample_catalog():
    return {
        ns: {repo: SAMPLE_TAGS[f"{ns}/{repo}"] for repo in repos}
        for ns, repos in group_repositories(SAMPLE_REPOSITORIES).items()
    }


# ── grouping ──────────────────────────────────────────────────────────────


def test_split_repository_first_segment():
    assert split_repository("team/app/api") == ("team", "app/api")


def test_split_repository_single_segment():
    assert split_repository("alpine") == ("alpine", "")


def test_group_repositories_keeps_fetch_order():
    grouped = group_repositories(["z/one", "a/two", "z/three"])
    assert list(grouped) == ["z", "a"]
    assert grouped["z"] == ["one", "three"]


# ── flattening ────────────────────────────────────────────────────────────


def test_flatten_empty_catalog():
    assert flatten_catalog({}) == []


def test_flatten_sample_catalog_labels():
    rows = flatten_catalog(_sample_catalog())
    assert [r.label for r in rows] == [
        "├── a",
        "│   ├── x",
        "│   │   └── 1.0",
        "│   └── y",
        "└── b",
        "    └── z",
        "        ├── 2.0",
        "        └── latest",
    ]


def test_flatten_sample_catalog_depths_and_paths():
    rows = flatten_catalog(_sample_catalog())
    assert [r.depth for r in rows] == [1, 2, 3, 2, 1, 2, 3, 3]
    assert [r.full_path for r in rows] == [
        "a",
        "a/x",
        "a/x/1.0",
        "a/y",
        "b",
        "b/z",
        "b/z/2.0",
        "b/z/latest",
    ]


def test_only_tag_rows_are_openable():
    rows = flatten_catalog(_sample_catalog())
    assert [r.full_path for r in rows if r.openable] == ["a/x/1.0", "b/z/2.0", "b/z/latest"]


def test_row_count_is_sum_of_levels():
    catalog = {
        "n1": {"r1": ["t1", "t2"], "r2": []},
        "n2": {"r3": ["t3"]},
        "n3": {},
    }
    rows = flatten_catalog(catalog)
    assert len(rows) == 3 + 3 + 3
    assert sum(r.depth == NAMESPACE for r in rows) == 3
    assert sum(r.depth == REPOSITORY for r in rows) == 3
    assert sum(r.depth == TAG for r in rows) == 3


def test_exactly_last_sibling_uses_terminal_glyph():
    catalog = {"n": {"r": ["t1", "t2", "t3"]}}
    tags = [r for r in flatten_catalog(catalog) if r.depth == TAG]
    assert [LAST_BRANCH in r.label for r in tags] == [False, False, True]


def test_tag_prefix_follows_grandparent_continuation():
    catalog = {"first": {"r": ["t"]}, "second": {"r": ["t"]}}
    rows = flatten_catalog(catalog)
    # under a non-last namespace the vertical line continues
    assert rows[2].label.startswith("│   ")
    # under the last namespace it is blank
    assert rows[5].label.startswith("    ")


def test_single_segment_repository():
    rows = flatten_catalog({"alpine": {"": ["3.19"]}})
    assert [r.label for r in rows] == ["└── alpine", "    └── .", "        └── 3.19"]
    assert rows[1].full_path == "alpine"
    assert rows[2].full_path == "alpine/3.19"
