import random
import string
import typing

from faker import Faker


ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits

Columns = typing.Sequence[typing.Tuple[str, int]]


class RandomPayloadGenerator:
    """Random alphanumeric values for synthetic rows.

    Each instance owns its own ``random.Random`` seeded from the OS entropy
    source, so workers never share generator state. Not for secrets.
    """

    def __init__(self, seed=None):
        self.rng = random.Random(seed)

    def generate(self, length: int) -> str:
        if length <= 0:
            raise ValueError(f"length must be positive, got {length}")
        return "".join(self.rng.choices(ALPHABET, k=length))

    def generate_row(self, columns: Columns) -> typing.List[str]:
        return [self.generate(length) for _, length in columns]


# column name -> Faker provider method
FAKER_PROVIDERS = {
    "name": "name",
    "last_name": "last_name",
    "first_name": "first_name",
    "title": "job",
    "address": "street_address",
    "city": "city",
    "state": "state",
    "country": "country",
    "phone": "phone_number",
    "fax": "phone_number",
    "email": "email",
}


class RealisticPayloadGenerator:
    """Plausible-looking values, truncated to the column length."""

    def __init__(self, seed=None):
        self.fake = Faker()
        if seed is not None:
            self.fake.seed_instance(seed)

    def generate(self, column: str, length: int) -> str:
        provider = FAKER_PROVIDERS.get(column)
        if provider is None:
            value = self.fake.lexify("?" * length)
        else:
            value = getattr(self.fake, provider)()
        return value[:length]

    def generate_row(self, columns: Columns) -> typing.List[str]:
        return [self.generate(column, length) for column, length in columns]
