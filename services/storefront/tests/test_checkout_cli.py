from __future__ import annotations

import pytest
from scripts.checkout_cli import main


def test_mock_purchase_succeeds(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(
        [
            "--mock",
            "--email",
            "demo@bobscorn.com",
            "--password",
            "popcorn",
            "--product",
            "caramel-drizzle-pack",
            "--quantity",
            "2",
        ]
    )

    out = capsys.readouterr().out
    assert code == 0
    assert "Caramel Drizzle Pack x2  $25.98" in out
    assert "completed: $25.98" in out


def test_wrong_password_exits_nonzero(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(
        ["--mock", "--email", "demo@bobscorn.com", "--password", "nope!!", "--product", "x"]
    )

    assert code == 1
    assert "Invalid email or password" in capsys.readouterr().err


def test_option_requires_name_value() -> None:
    with pytest.raises(SystemExit):
        main(
            [
                "--mock",
                "--email",
                "demo@bobscorn.com",
                "--password",
                "popcorn",
                "--product",
                "farm-fresh-yellow-kernels",
                "--option",
                "size",
            ]
        )
