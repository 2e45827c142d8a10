import pytest

from enoch.cli import (
    ERR_BINARY_SPECIFIED,
    ERR_CHK_DCMD,
    ERR_CHK_ECMD,
    ERR_CHK_GCMD,
    ERR_CHK_MULTICMD,
    ERR_CHK_PCMD,
    ERR_CHK_SIZE,
    ERR_CHK_ZCMD,
    ERR_PADOTP_SPECIFIED,
    ERR_PARAMSIZE_DEV,
    ERR_PARAMSIZE_INP,
    ERR_PARAMSIZE_SIZ,
    Command,
    Options,
    UsageError,
    describe_end,
    describe_start,
    main,
    parse_args,
    parse_size,
    usage_text,
)
from enoch.pad import ERR_OTP_SHORT


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


CLEAR = b"meet me by the old mill at noon\n"


# ---- parse_size ----

@pytest.mark.parametrize(
    "text, expected",
    [("1K", 1024), ("1k", 1024), ("1M", 1048576), ("1G", 1073741824), ("42", 42), ("abc", 0)],
)
def test_parse_size_values(text, expected):
    assert parse_size(text) == expected


def test_parse_size_scales_by_suffix():
    assert parse_size("3M") == 3 * parse_size("1M")
    assert parse_size("5K") == 5 * parse_size("1K")


def test_parse_size_empty_is_error():
    with pytest.raises(UsageError) as info:
        parse_size("")
    assert info.value.message == ERR_CHK_SIZE


def test_parse_size_too_long_is_error():
    with pytest.raises(UsageError) as info:
        parse_size("1" * 26)
    assert info.value.message == ERR_PARAMSIZE_SIZ


# ---- parse_args ----

def test_parse_generate_by_size():
    options = parse_args(["-G", "-s1M", "-p", "new.otp"])
    assert options.command is Command.GENERATE
    assert options.alternate is False
    assert options.size == 1048576
    assert options.size_text == "1M"
    assert options.otp_path == "new.otp"


def test_parse_generate_deniable():
    options = parse_args(["-G", "-i", "a", "-e", "b", "-p", "c", "-f"])
    assert options.alternate is True
    assert options.fill is True


def test_parse_multiple_commands():
    with pytest.raises(UsageError) as info:
        parse_args(["-G", "-E"])
    assert info.value.message == ERR_CHK_MULTICMD


def test_parse_help_requests_usage():
    with pytest.raises(UsageError) as info:
        parse_args(["-h"])
    assert info.value.show_usage is True


def test_parse_unknown_option_requests_usage():
    with pytest.raises(UsageError) as info:
        parse_args(["-E", "-z"])
    assert info.value.show_usage is True


def test_parse_no_command():
    with pytest.raises(UsageError) as info:
        parse_args(["-v"])
    assert info.value.message == ERR_CHK_ZCMD


def test_parse_binary_only_for_pyx():
    with pytest.raises(UsageError) as info:
        parse_args(["-E", "-b", "-i", "a", "-p", "b", "-o", "c"])
    assert info.value.message == ERR_BINARY_SPECIFIED


def test_parse_fill_only_for_deniable():
    with pytest.raises(UsageError) as info:
        parse_args(["-G", "-s1K", "-p", "x", "-f"])
    assert info.value.message == ERR_PADOTP_SPECIFIED


@pytest.mark.parametrize(
    "argv, message",
    [
        (["-P"], ERR_CHK_PCMD),
        (["-P", "-p", "x", "-i", "y"], ERR_CHK_PCMD),
        (["-D", "-i", "a", "-p", "b"], ERR_CHK_DCMD),
        (["-E", "-i", "a", "-p", "b"], ERR_CHK_ECMD),
        (["-G", "-s1K"], ERR_CHK_GCMD),
        (["-G", "-i", "a", "-p", "b"], ERR_CHK_GCMD),
    ],
)
def test_parse_command_usage_errors(argv, message):
    with pytest.raises(UsageError) as info:
        parse_args(argv)
    assert info.value.message == message


def test_parse_pyx_terse_when_output_given():
    assert parse_args(["-P", "-p", "x", "-o", "r"]).alternate is True
    assert parse_args(["-P", "-p", "x"]).alternate is False


def test_parse_encrypt_mode_follows_pad_existence(workdir):
    (workdir / "old.otp").write_bytes(b"\x00" * 4)
    assert parse_args(["-E", "-i", "c", "-p", "old.otp", "-o", "o"]).alternate is False
    assert parse_args(["-E", "-i", "c", "-p", "new.otp", "-o", "o"]).alternate is True


def test_parse_device_prefix():
    options = parse_args(["-r", "urandom", "-P", "-p", "x"])
    assert options.device_path == "/dev/urandom"


def test_parse_device_too_long():
    with pytest.raises(UsageError) as info:
        parse_args(["-r", "d" * 40, "-P", "-p", "x"])
    assert info.value.message == ERR_PARAMSIZE_DEV


def test_parse_path_too_long():
    with pytest.raises(UsageError) as info:
        parse_args(["-E", "-i", "a" * 200, "-p", "b", "-o", "c"])
    assert info.value.message == ERR_PARAMSIZE_INP


# ---- text helpers ----

def test_usage_text_names_program():
    text = usage_text("myer")
    assert text.startswith("myer : Equivocal dual acronym")
    assert "-G : Generate OTP/PD OTP" in text


def test_describe_start_generate():
    options = Options(command=Command.GENERATE, device_path="/dev/random", size_text="1K")
    text = describe_start(options, "er")
    assert "RNG device is /dev/random\n" in text
    assert "Command selected is G : Generate\n" in text
    assert "Generate new OTP by size\n" in text


def test_describe_start_pyx_terse_binary():
    options = Options(command=Command.PYX, alternate=True, binary=True)
    text = describe_start(options, "er")
    assert "Perform Pyx Assessment of input OTP (bitmode); terse output to file\n" in text


def test_describe_end_deniable():
    options = Options(
        command=Command.GENERATE,
        alternate=True,
        input_path="clear.in",
        encrypted_path="existing.enc",
        otp_path="new.otp",
    )
    text = describe_end(options)
    assert "\nInput fsp : <clear.in>\n" in text
    assert "Encrypted fsp <existing.enc>\n" in text
    assert "OTP fsp for plausible deniability : <new.otp>\n" in text


def test_describe_end_plain_otp_and_size():
    options = Options(command=Command.DECRYPT, otp_path="p.otp", size_text="1M")
    text = describe_end(options)
    assert text == "OTP fsp : <p.otp>\nOTP size is <1M>\n"


# ---- main ----

def test_main_encrypt_decrypt_round_trip(workdir):
    (workdir / "clear.txt").write_bytes(CLEAR)
    (workdir / "pad.otp").write_bytes(bytes(range(64)))
    assert main(["-E", "-i", "clear.txt", "-p", "pad.otp", "-o", "enc.bin"]) == 0
    assert len((workdir / "enc.bin").read_bytes()) == len(CLEAR)
    assert main(["-D", "-i", "enc.bin", "-p", "pad.otp", "-o", "out.txt"]) == 0
    assert (workdir / "out.txt").read_bytes() == CLEAR


def test_main_zero_pad_leaves_text_unchanged(workdir):
    (workdir / "clear.txt").write_bytes(CLEAR)
    (workdir / "pad.otp").write_bytes(bytes(len(CLEAR)))
    assert main(["-E", "-i", "clear.txt", "-p", "pad.otp", "-o", "enc.bin"]) == 0
    assert (workdir / "enc.bin").read_bytes() == CLEAR


def test_main_encrypt_with_new_pad(workdir):
    (workdir / "clear.txt").write_bytes(CLEAR)
    args = ["-r", "urandom", "-E", "-i", "clear.txt", "-p", "fresh.otp", "-o", "enc.bin"]
    assert main(args) == 0
    assert len((workdir / "fresh.otp").read_bytes()) == len(CLEAR)
    assert main(["-r", "urandom", "-D", "-i", "enc.bin", "-p", "fresh.otp", "-o", "out.txt"]) == 0
    assert (workdir / "out.txt").read_bytes() == CLEAR


def test_main_short_pad_fails(workdir, capsys):
    (workdir / "clear.txt").write_bytes(CLEAR)
    (workdir / "pad.otp").write_bytes(b"\x01\x02")
    assert main(["-r", "urandom", "-E", "-i", "clear.txt", "-p", "pad.otp", "-o", "enc.bin"]) == 1
    assert ERR_OTP_SHORT in capsys.readouterr().err


def test_main_generate_by_size(workdir):
    assert main(["-r", "urandom", "-G", "-s1K", "-p", "new.otp"]) == 0
    assert len((workdir / "new.otp").read_bytes()) == 1024


def test_main_generate_deniable_with_fill(workdir):
    (workdir / "clear.txt").write_bytes(CLEAR)
    encrypted = bytes((i * 7 + 3) % 256 for i in range(len(CLEAR) + 10))
    (workdir / "secret.enc").write_bytes(encrypted)
    args = ["-r", "urandom", "-G", "-i", "clear.txt", "-e", "secret.enc", "-p", "deny.otp", "-f"]
    assert main(args) == 0
    assert len((workdir / "deny.otp").read_bytes()) == len(encrypted)
    decrypt_args = ["-r", "urandom", "-D", "-i", "secret.enc", "-p", "deny.otp", "-o", "out.txt"]
    assert main(decrypt_args) == 0
    assert (workdir / "out.txt").read_bytes()[: len(CLEAR)] == CLEAR


def test_main_decrypt_to_size(workdir):
    (workdir / "enc.bin").write_bytes(bytes(2048))
    (workdir / "pad.otp").write_bytes(bytes(2048))
    assert main(["-r", "urandom", "-D", "-i", "enc.bin", "-p", "pad.otp", "-o", "out", "-s1K"]) == 0
    assert len((workdir / "out").read_bytes()) == 1024


def test_main_pyx_terse_report(workdir):
    (workdir / "pad.otp").write_bytes(bytes(range(256)) * 4)
    assert main(["-r", "urandom", "-P", "-p", "pad.otp", "-o", "report.csv"]) == 0
    lines = (workdir / "report.csv").read_text().splitlines()
    assert lines[0] == "0,File-bytes,Entropy,Chi-square,Mean,Monte-Carlo-Pi,Serial-Correlation"
    assert lines[1].startswith("1,1024,")


def test_main_pyx_detailed_report(workdir, capsys):
    (workdir / "pad.otp").write_bytes(bytes(range(256)))
    assert main(["-r", "urandom", "-P", "-b", "-p", "pad.otp"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Pyx Trial Assessment\n")
    assert "bits per bit" in out


def test_main_verbose_prints_banner(workdir, capsys):
    assert main(["-v", "-r", "urandom", "-G", "-s1K", "-p", "new.otp"]) == 0
    out = capsys.readouterr().out
    assert "Command selected is G : Generate\n" in out
    assert "OTP size is <1K>\n" in out


def test_main_help_prints_usage(capsys):
    assert main(["-h"]) == 1
    assert "One Time Pad management" in capsys.readouterr().out


def test_main_command_error(capsys):
    assert main(["-E", "-i", "only.txt"]) == 1
    assert ERR_CHK_ECMD in capsys.readouterr().err