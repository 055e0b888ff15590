"""Unit tests for the argparse command line front end."""

import hashlib
import hmac
import json
import uuid

import pytest

from cryptbox.frontend.cli import app


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CRYPTBOX_KEY_SIZE", "CRYPTBOX_ENCODING", "CRYPTBOX_DH_GROUP",
                 "CRYPTBOX_KDF", app.PASSWORD_ENV):
        monkeypatch.delenv(name, raising=False)


def run(capsys, *argv):
    code = app.main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out.strip(), captured.err.strip()


# --- prng ---

def test_prng_bytes_hex(capsys):
    code, out, _ = run(capsys, "prng", "--type", "bytes", "--size", "8")
    assert code == 0
    assert len(bytes.fromhex(out)) == 8


def test_prng_int_range(capsys):
    code, out, _ = run(capsys, "prng", "--type", "int", "--min", "5", "--max", "6")
    assert code == 0
    assert out == "5"


def test_prng_uuid(capsys):
    code, out, _ = run(capsys, "prng", "--type", "uuid")
    assert code == 0
    uuid.UUID(out)


def test_prng_bad_range_is_error(capsys):
    code, out, err = run(capsys, "prng", "--type", "int", "--min", "9", "--max", "1")
    assert code == 1
    assert out == ""
    assert err.startswith("cryptbox: error:")
    assert len(err.splitlines()) == 1


def test_prng_encoding_from_env(capsys, monkeypatch):
    monkeypatch.setenv("CRYPTBOX_ENCODING", "base64")
    code, out, _ = run(capsys, "prng", "--type", "bytes", "--size", "3")
    assert code == 0
    assert len(out) == 4


def test_prng_encoding_is_case_insensitive(capsys):
    code, out, _ = run(capsys, "prng", "--type", "bytes", "--size", "4", "--encoding", "HEX")
    assert code == 0
    assert len(bytes.fromhex(out)) == 4


# --- scrypt ---

def test_scrypt_matches_reference(capsys):
    code, out, _ = run(capsys, "scrypt", "--password", "pw", "--salt", "NaCl", "--size", "32")
    assert code == 0
    expected = hashlib.scrypt(b"pw", salt=b"NaCl", n=2 ** 14, r=8, p=1, dklen=32)
    assert out == expected.hex()


def test_scrypt_missing_password(capsys):
    code, _, err = run(capsys, "scrypt", "--salt", "NaCl")
    assert code == 1
    assert "password" in err


# --- cipher / decipher ---

def test_cipher_decipher_roundtrip(tmp_path, capsys):
    src = tmp_path / "plain.txt"
    enc = tmp_path / "plain.enc"
    dec = tmp_path / "plain.out"
    src.write_bytes(b"hello world")

    code, _, _ = run(capsys, "cipher", "-p", "p@ss", "--size", "256", "-i", str(src), "-o", str(enc))
    assert code == 0
    assert enc.stat().st_size == 48

    code, _, _ = run(capsys, "decipher", "-p", "p@ss", "--size", "256", "-i", str(enc), "-o", str(dec))
    assert code == 0
    assert dec.read_bytes() == b"hello world"


def test_cipher_with_explicit_salt(tmp_path, capsys):
    src = tmp_path / "plain.txt"
    enc = tmp_path / "plain.enc"
    src.write_bytes(b"data")
    salt_hex = "00112233445566778899aabbccddeeff"

    code, _, _ = run(capsys, "cipher", "-p", "pw", "--salt", salt_hex, "-i", str(src), "-o", str(enc))
    assert code == 0
    assert enc.read_bytes()[:16] == bytes.fromhex(salt_hex)


def test_cipher_password_from_env(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv(app.PASSWORD_ENV, "from-env")
    src = tmp_path / "plain.txt"
    enc = tmp_path / "plain.enc"
    dec = tmp_path / "plain.out"
    src.write_bytes(b"env secret")

    assert run(capsys, "cipher", "-i", str(src), "-o", str(enc))[0] == 0
    assert run(capsys, "decipher", "-i", str(enc), "-o", str(dec))[0] == 0
    assert dec.read_bytes() == b"env secret"


def test_cipher_missing_password_creates_nothing(tmp_path, capsys):
    src = tmp_path / "plain.txt"
    enc = tmp_path / "plain.enc"
    src.write_bytes(b"data")
    code, _, err = run(capsys, "cipher", "-i", str(src), "-o", str(enc))
    assert code == 1
    assert "password" in err
    assert not enc.exists()


def test_cipher_missing_input_names_path(tmp_path, capsys):
    missing = tmp_path / "missing.txt"
    code, _, err = run(capsys, "cipher", "-p", "pw", "-i", str(missing), "-o", str(tmp_path / "x"))
    assert code == 1
    assert str(missing) in err


def test_decipher_corrupted_input(tmp_path, capsys):
    enc = tmp_path / "bad.enc"
    enc.write_bytes(b"\x00" * 40)
    code, _, err = run(capsys, "decipher", "-p", "pw", "-i", str(enc), "-o", str(tmp_path / "out"))
    assert code == 1
    assert "wrong password or corrupted data" in err


def test_cipher_rejects_unsupported_size(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        app.main(["cipher", "-p", "pw", "--size", "512", "-i", "a", "-o", "b"])
    assert excinfo.value.code == 2


# --- hash / hmac ---

def test_hash_file(tmp_path, capsys):
    src = tmp_path / "data.bin"
    src.write_bytes(b"abc")
    code, out, _ = run(capsys, "hash", "-a", "sha512", "-i", str(src))
    assert code == 0
    assert out == hashlib.sha512(b"abc").hexdigest()


def test_hash_unknown_algorithm(tmp_path, capsys):
    src = tmp_path / "data.bin"
    src.write_bytes(b"abc")
    code, _, err = run(capsys, "hash", "-a", "nope", "-i", str(src))
    assert code == 1
    assert "unsupported hash algorithm" in err


@pytest.mark.parametrize("command", [("hash",), ("hmac", "-k", "key")])
def test_variable_length_algorithm_is_error(tmp_path, capsys, command):
    src = tmp_path / "data.bin"
    src.write_bytes(b"abc")
    code, out, err = run(capsys, *command, "-a", "shake_128", "-i", str(src))
    assert code == 1
    assert out == ""
    assert err.startswith("cryptbox: error: unsupported hash algorithm")
    assert len(err.splitlines()) == 1


def test_hmac_file(tmp_path, capsys):
    src = tmp_path / "data.bin"
    src.write_bytes(b"abc")
    code, out, _ = run(capsys, "hmac", "-k", "key", "-i", str(src))
    assert code == 0
    assert out == hmac.new(b"key", b"abc", hashlib.sha256).hexdigest()


# --- diffie-hellman ---

def test_diffie_hellman_generate(capsys):
    code, out, _ = run(capsys, "diffie-hellman", "--group", "modp2")
    assert code == 0
    data = json.loads(out)
    assert set(data) == {"prime", "generator", "publicKey", "privateKey"}
    assert data["generator"] == "02"


def test_diffie_hellman_exchange_symmetry(capsys):
    _, alice_out, _ = run(capsys, "diffie-hellman", "--group", "modp2")
    _, bob_out, _ = run(capsys, "diffie-hellman", "--group", "modp2")
    alice, bob = json.loads(alice_out), json.loads(bob_out)

    secrets = []
    for me, peer in ((alice, bob), (bob, alice)):
        code, out, _ = run(
            capsys,
            "diffie-hellman",
            "--prime", me["prime"],
            "--generator", me["generator"],
            "--private-key", me["privateKey"],
            "--public-key", peer["publicKey"],
        )
        assert code == 0
        result = json.loads(out)
        assert result["publicKey"] == me["publicKey"]
        secrets.append(result["secret"])
    assert secrets[0] == secrets[1]


def test_diffie_hellman_partial_restore(capsys):
    code, out, err = run(capsys, "diffie-hellman", "--public-key", "08")
    assert code == 1
    assert out == ""
    assert "missing" in err


def test_diffie_hellman_base64_inputs(capsys):
    # p = 23, g = 5, a = 6, B = 19 -> secret 2
    code, out, _ = run(
        capsys,
        "diffie-hellman",
        "--prime", "Fw==", "--prime-encoding", "base64",
        "--generator", "05",
        "--private-key", "06",
        "--public-key", "13",
    )
    assert code == 0
    assert json.loads(out)["secret"] == "02"


def test_diffie_hellman_malformed_group(capsys):
    code, _, err = run(
        capsys, "diffie-hellman",
        "--prime", "17", "--generator", "17", "--private-key", "06", "--public-key", "13",
    )
    assert code == 1
    assert "generator" in err


def test_no_command_is_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        app.main([])
    assert excinfo.value.code == 2
