"""Test ContextBuilder: merging session and current messages."""

import pytest

from modbot.memory.context import ContextBuilder, to_history
from modbot.memory.session import SessionBuffer


@pytest.fixture
def session(storage) -> SessionBuffer:
    return SessionBuffer(storage, max_messages=50)


@pytest.fixture
def builder(session) -> ContextBuilder:
    return ContextBuilder(session)


def _ids(messages) -> list[str]:
    return [m.id for m in messages]


class TestBuildContext:
    """Test build_context() ordering and deduplication."""

    async def test_merges_and_dedupes_overlap(
        self, builder, session, make_message
    ) -> None:
        m1, m2, m3 = make_message("m1"), make_message("m2"), make_message("m3")
        await session.append([m1, m2])

        context = builder.build_context([m2, m3], include_session_context=True)

        assert _ids(context) == ["m1", "m2", "m3"]

    async def test_without_session_context(self, builder, session, make_message) -> None:
        await session.append([make_message("s1")])

        context = builder.build_context(
            [make_message("c1")], include_session_context=False
        )

        assert _ids(context) == ["c1"]

    async def test_only_last_six_session_messages(
        self, builder, session, make_message
    ) -> None:
        await session.append([make_message(f"s{i}") for i in range(10)])

        context = builder.build_context([])

        assert _ids(context) == ["s4", "s5", "s6", "s7", "s8", "s9"]

    async def test_custom_session_window(self, session, make_message) -> None:
        await session.append([make_message(f"s{i}") for i in range(5)])

        context = ContextBuilder(session, session_window=2).build_context([])

        assert _ids(context) == ["s3", "s4"]

    async def test_first_occurrence_wins(self, builder, session, make_message) -> None:
        """A duplicate id keeps the session copy and its position."""
        session_copy = make_message("m1", content="from session")
        await session.append([session_copy])

        context = builder.build_context(
            [make_message("m0"), make_message("m1", content="from current")]
        )

        assert _ids(context) == ["m1", "m0"]
        assert context[0].content == "from session"

    def test_duplicates_within_current_messages(self, builder, make_message) -> None:
        m1 = make_message("m1")

        context = builder.build_context([m1, make_message("m2"), m1])

        assert _ids(context) == ["m1", "m2"]

    async def test_ids_are_unique_for_heavy_overlap(
        self, builder, session, make_message
    ) -> None:
        shared = [make_message(f"m{i}") for i in range(8)]
        await session.append(shared)

        context = builder.build_context(shared + shared[:3])

        assert len(_ids(context)) == len(set(_ids(context)))
        assert _ids(context) == [f"m{i}" for i in [2, 3, 4, 5, 6, 7, 0, 1]]

    async def test_has_no_side_effects(self, builder, session, make_message) -> None:
        await session.append([make_message("s1")])
        before = session.messages

        builder.build_context([make_message("c1")])

        assert session.messages == before


class TestToHistory:
    def test_converts_to_role_content_pairs(self, make_message) -> None:
        history = to_history(
            [
                make_message("m1", role="system", content="Be brief"),
                make_message("m2", role="user", content="Hi"),
            ]
        )

        assert history == [
            {"role": "system", "content": "Be brief"},
            {"role": "user", "content": "Hi"},
        ]
