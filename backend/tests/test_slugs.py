import pytest

from purdetall.services.slugs import generate_slug


@pytest.mark.parametrize(
    ("title", "expected"),
    [
        ("Cómo Proteger la Pintura", "como-proteger-la-pintura"),
        ("  --Hola   Mundo--  ", "hola-mundo"),
        ("Ñandú & Café", "nandu-cafe"),
        ("Detailing 2025: guía", "detailing-2025-guia"),
        ("¡¿?!", ""),
    ],
)
def test_generate_slug(title, expected):
    assert generate_slug(title) == expected


def test_slug_is_deterministic_for_equivalent_titles():
    assert generate_slug("Lavado a mano") == generate_slug("  LAVADO  a  Mano! ")
