"""Unit tests for the entity ID generator."""

import re

from dfood.domain.services import IdGenerator, generate_user_id


class TestIdGenerator:

    def test_generate_shape(self):
        entity_id = IdGenerator.generate()

        assert re.fullmatch(r"\d+-[0-9a-f]{8}", entity_id)

    def test_generate_with_prefix(self):
        assert IdGenerator.generate("order").startswith("order-")

    def test_generated_ids_are_unique(self):
        ids = {IdGenerator.generate() for _ in range(1000)}

        assert len(ids) == 1000

    def test_timestamp_part_is_monotonic(self):
        first = int(IdGenerator.generate().split("-")[0])
        second = int(IdGenerator.generate().split("-")[0])

        assert second >= first

    def test_validate(self):
        assert IdGenerator.validate(IdGenerator.generate())
        assert IdGenerator.validate(IdGenerator.generate("user"))
        assert not IdGenerator.validate("not an id")
        assert not IdGenerator.validate("123-XYZ")
        assert not IdGenerator.validate(None)


def test_generate_user_id():
    user_id = generate_user_id()

    assert user_id.startswith("user-")
    assert IdGenerator.validate(user_id)
