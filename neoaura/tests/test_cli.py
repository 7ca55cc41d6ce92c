import pytest

from neoaura.__main__ import main


def test_list(capsys):
    assert main(["list"]) == 0
    out = capsys.readouterr().out
    assert "(2015 AC246)" in out
    assert len(out.strip().splitlines()) == 8


def test_impact(capsys):
    assert main(["impact", "--diameter", "50", "--velocity", "17", "--ocean"]) == 0
    out = capsys.readouterr().out
    assert "risk high" in out
    assert "Tsunami wave height" in out


def test_deflect_forced(capsys):
    assert main(["deflect", "3704144", "--method", "nuclear", "--days", "200", "--force-success"]) == 0
    out = capsys.readouterr().out
    assert "Nuclear Deflection on (2015 AC246) (ID: 3704144): SUCCESS" in out


def test_deflect_seeded_is_reproducible(capsys):
    main(["deflect", "3704144", "--seed", "11"])
    first = capsys.readouterr().out
    main(["deflect", "3704144", "--seed", "11"])
    assert capsys.readouterr().out == first


def test_assess(capsys):
    assert main(["assess", "54503221", "--horizon", "365"]) == 0
    out = capsys.readouterr().out
    assert "risk" in out
    assert "Closest approach" in out


def test_unknown_body(capsys):
    assert main(["assess", "1"]) == 1
    assert "No catalogued body" in capsys.readouterr().err


def test_conflicting_flags():
    with pytest.raises(SystemExit):
        main(["deflect", "3704144", "--force-success", "--force-failure"])
