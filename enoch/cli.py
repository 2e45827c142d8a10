"""Command line front end: generate, encrypt, decrypt and assess one time pads."""

from __future__ import annotations

import enum
import getopt
import os
import re
import stat
import sys
from contextlib import ExitStack
from dataclasses import dataclass
from typing import BinaryIO, Sequence

from .pad import (
    PadError,
    check_decrypt_size,
    decrypt,
    encrypt,
    encrypt_new_pad,
    generate,
    generate_deniable,
    open_default_device,
)
from .randomness import assess
from .report import detailed_report, terse_report

ER_VERSION = "0.1"
LE_VERSION = "0.1"
DEFAULT_PROGNAME = "er"
OPTSTR = "GEDPvfbr:i:s:o:p:e:h"

DEV_PATH_MAX = 30
SIZE_LEN = 25
MAX_FSP_PATH = 128
DEV_PREFIX = "/dev/"

ERR_FOPEN_INPUT = "Can't open Input file specified (read)"
ERR_FOPEN_OUTPUT = "Can't open Output file specified (write)"
ERR_FOPEN_OTP = "Can't open OTP file specified"
ERR_FOPEN_ENCRYPTED = "Can't open Encrypted file specified"
ERR_BINARY_SPECIFIED = "Binary option only to be used with Pyx command"
ERR_PADOTP_SPECIFIED = "Fill OTP only to be used with Generate/plausible deniability command"
ERR_CHK_DEV = "Device specified cannot be opened"
ERR_CHK_SIZE = "Size specified in error"
ERR_CHK_MULTICMD = "Only a single command should be specified, multiple commands not allowed"
ERR_CHK_GCMD = "Error : G (Generate) command usage is incorrect. Reference -h or manual"
ERR_CHK_ECMD = "Error : E (Encrypt) command usage is incorrect. Reference -h or manual"
ERR_CHK_DCMD = "Error : D (Decrypt) command usage is incorrect. Reference -h or manual"
ERR_CHK_PCMD = "Error : P (Pyx assessment) command usage is incorrect. Reference -h or manual"
ERR_CHK_ZCMD = "Error : No valid command specified. Reference -h or manual"
ERR_PARAMSIZE_INP = "Specified -i (input) fsp is too long"
ERR_PARAMSIZE_ENC = "Specified -e (encrypted) fsp is too long"
ERR_PARAMSIZE_OUT = "Specified -o (output) fsp is too long"
ERR_PARAMSIZE_OTP = "Specified -p (OTP) fsp is too long"
ERR_PARAMSIZE_SIZ = "Specified -s (size) value is too long"
ERR_PARAMSIZE_DEV = "Specified -r (device) name is too long"
ERR_CLOSE = "Error closing: "

_FACTORS = {"K": 1024, "M": 1048576, "G": 1073741824}
_SIZE_RE = re.compile(r"\s*([+-]?)(\d*)")


class Command(enum.Enum):
    """The four commands, keyed by their option letter."""

    GENERATE = "G"
    ENCRYPT = "E"
    DECRYPT = "D"
    PYX = "P"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Command.GENERATE: "Generate",
    Command.ENCRYPT: "Encrypt",
    Command.DECRYPT: "Decrypt",
    Command.PYX: "Pyx Assessment",
}


class UsageError(Exception):
    """Bad command line; ``show_usage`` asks for the usage text instead of the message."""

    def __init__(self, message: str = "", show_usage: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.show_usage = show_usage


@dataclass
class Options:
    """Everything the command line selected.

    ``alternate`` marks the second form of a command: deniable pad for
    Generate, fresh pad for Encrypt and terse file output for Pyx.
    """

    command: Command | None = None
    alternate: bool = False
    verbose: bool = False
    binary: bool = False
    fill: bool = False
    device_path: str = ""
    size_text: str = ""
    size: int = 0
    input_path: str = ""
    output_path: str = ""
    otp_path: str = ""
    encrypted_path: str = ""


def parse_size(text: str) -> int:
    """Parse a size with an optional K, M or G suffix into bytes."""
    if len(text) > SIZE_LEN:
        raise UsageError(ERR_PARAMSIZE_SIZ)
    if not text:
        raise UsageError(ERR_CHK_SIZE)
    match = _SIZE_RE.match(text)
    sign, digits = match.group(1), match.group(2)
    value = int(digits) if digits else 0
    if sign == "-" and value:
        raise UsageError(ERR_CHK_SIZE)
    return value * _FACTORS.get(text[-1].upper(), 1)


def _fsp(value: str, message: str) -> str:
    if len(value) > MAX_FSP_PATH:
        raise UsageError(message)
    return value


def _device_name(name: str) -> str:
    if not name or len(name) >= DEV_PATH_MAX:
        raise UsageError(ERR_PARAMSIZE_DEV)
    path = name if name.startswith("/") else DEV_PREFIX + name
    if len(path) >= DEV_PATH_MAX:
        raise UsageError(ERR_PARAMSIZE_DEV)
    return path


def _readable(path: str) -> bool:
    return os.access(path, os.R_OK)


def _validate(options: Options) -> None:
    command = options.command
    has_input = bool(options.input_path)
    has_output = bool(options.output_path)
    has_otp = bool(options.otp_path)
    has_encrypted = bool(options.encrypted_path)

    if command is None:
        raise UsageError(ERR_CHK_ZCMD)
    if command is Command.PYX:
        if has_input or not has_otp or has_encrypted:
            raise UsageError(ERR_CHK_PCMD)
        options.alternate = has_output
    elif command is Command.DECRYPT:
        if not has_input or not has_otp or not has_output or has_encrypted:
            raise UsageError(ERR_CHK_DCMD)
    elif command is Command.ENCRYPT:
        if not has_input or not has_output or not has_otp:
            raise UsageError(ERR_CHK_ECMD)
        options.alternate = not _readable(options.otp_path)
    else:
        if options.size_text:
            if not has_otp or has_output or has_encrypted or has_input:
                raise UsageError(ERR_CHK_GCMD)
            options.alternate = False
        else:
            if not has_input or not has_encrypted or not has_otp or has_output:
                raise UsageError(ERR_CHK_GCMD)
            options.alternate = True

    if options.fill and not (command is Command.GENERATE and options.alternate):
        raise UsageError(ERR_PADOTP_SPECIFIED)


def parse_args(argv: Sequence[str]) -> Options:
    """Turn command line arguments (without the program name) into Options."""
    try:
        opts, _ = getopt.gnu_getopt(list(argv), OPTSTR)
    except getopt.GetoptError as exc:
        raise UsageError(str(exc), show_usage=True) from exc

    command = None
    seen = 0
    for flag, _ in opts:
        letter = flag[1]
        if letter in "GEDP":
            command = Command(letter)
            seen += 1
            if seen > 1:
                raise UsageError(ERR_CHK_MULTICMD)
        elif letter == "h":
            raise UsageError(show_usage=True)

    options = Options(command=command)
    for flag, value in opts:
        letter = flag[1]
        if letter == "i":
            options.input_path = _fsp(value, ERR_PARAMSIZE_INP)
        elif letter == "o":
            options.output_path = _fsp(value, ERR_PARAMSIZE_OUT)
        elif letter == "p":
            options.otp_path = _fsp(value, ERR_PARAMSIZE_OTP)
        elif letter == "e":
            options.encrypted_path = _fsp(value, ERR_PARAMSIZE_ENC)
        elif letter == "v":
            options.verbose = True
        elif letter == "b":
            if command is not Command.PYX:
                raise UsageError(ERR_BINARY_SPECIFIED)
            options.binary = True
        elif letter == "f":
            options.fill = True
        elif letter == "r":
            options.device_path = _device_name(value)
        elif letter == "s":
            options.size = parse_size(value)
            options.size_text = value

    _validate(options)
    return options


def usage_text(progname: str | None = None) -> str:
    """The help text printed for -h or a bad option."""
    prog = progname or DEFAULT_PROGNAME
    return (
        f'{prog} : Equivocal dual acronym "Encrypt Right"/"Enoch Root" '
        f"(v{ER_VERSION};libenoch:v{LE_VERSION})\n"
        f"{prog} : -G : Generate OTP/PD OTP, -E : Encrypt, -D : Decrypt, -P : Pyx\n"
        "[-i inputfile] [-e inputfile] [-p otp file] [-o outputfile]\n"
        "[-s size] [-r devname] [-v] [-b] [-f] [-h]\n\n"
        "-G -s<size BKMG> -pfsp || -G -ifsp -efsp -pfsp -f\n"
        "[-G -s1M -pnew.otp]\n"
        "[-G -iclear.in -eexisting.enc -pnew.otp -f]\n\n"
        "-E -ifsp -pfsp -ofsp  || -E -ifsp -pnewfsp -ofsp\n"
        "[-E -iclear.in -pexisting.otp -oencrypted.out]\n"
        "[-E -iclear.in -pnew.otp -oencrypted.out]\n\n"
        "-D -ifsp -pfsp -ofsp || -D -ifsp -pfsp -ofsp -s<size BKMG>\n"
        "[-D -iencrypted.in -pexisting.otp -oclear.out]\n"
        "[-D -iencrypted.in -pexisting.otp -oclear.out -s1M]\n\n"
        "-P -pfsp -b || -P -pfsp -ofsp -b\n"
        "[-P -pexisting.otp] [-b]\n"
        "[-P -pexisting.otp -oterse.rpt] [-b]\n\n"
        "-v : Verbose output, -r : RNG device, -b : Pyx binary mode, -f : Fill PD OTP\n"
        f"{prog} : One Time Pad management to generate, encrypt, decrypt, assess and deny\n"
    )


def _mode_description(options: Options) -> list[str]:
    command = options.command
    if command is Command.GENERATE:
        if not options.alternate:
            return ["Generate new OTP by size\n"]
        lines = ["Generate new OTP from clear file and encrypted file for plausible deniability\n"]
        if options.fill:
            lines.append("(Fill new OTP to encrypted file size)\n")
        return lines
    if command is Command.ENCRYPT:
        if options.alternate:
            return ["Encrypt clear file with dynamically created OTP to create new encrypted file\n"]
        return ["Encrypt clear file with existing OTP to create new encrypted file\n"]
    if command is Command.DECRYPT:
        if options.size_text:
            return ["Decrypt input encrypted file (to size) with existing OTP to create clear file\n"]
        return ["Decrypt input encrypted file with existing OTP to create clear file\n"]
    if command is Command.PYX:
        unit = "bitmode" if options.binary else "bytemode"
        where = "terse output to file" if options.alternate else "detailed output to stdout"
        return [f"Perform Pyx Assessment of input OTP ({unit}); {where}\n"]
    return []


def describe_start(options: Options, progname: str | None = None) -> str:
    """Verbose banner printed before a command runs."""
    prog = progname or DEFAULT_PROGNAME
    parts = [
        f'{prog} : "Encrypt Right"/"Enoch Root"\n',
        "(An equivocal dual acronym)\n",
        f"{prog} : v{ER_VERSION}; libenoch : v{LE_VERSION}\n\n",
        f"RNG device is {options.device_path}\n",
    ]
    if options.command is not None:
        parts.append(f"Command selected is {options.command.value} : {options.command.label}\n")
    parts.append("Mode description :\n")
    parts.extend(_mode_description(options))
    return "".join(parts)


def describe_end(options: Options) -> str:
    """Verbose summary of the files and size used, printed after success."""
    parts = []
    if options.input_path:
        parts.append(f"\nInput fsp : <{options.input_path}>\n")
    if options.output_path:
        parts.append(f"Output fsp : <{options.output_path}>\n")
    if options.encrypted_path:
        parts.append(f"Encrypted fsp <{options.encrypted_path}>\n")
    if options.otp_path:
        if options.command is Command.GENERATE and options.alternate:
            parts.append(f"OTP fsp for plausible deniability : <{options.otp_path}>\n")
        else:
            parts.append(f"OTP fsp : <{options.otp_path}>\n")
    if options.size_text:
        parts.append(f"OTP size is <{options.size_text}>\n")
    return "".join(parts)


def _open(stack: ExitStack, path: str, mode: str, message: str):
    try:
        stream = open(path, mode)
    except OSError as exc:
        raise UsageError(message) from exc
    return stack.enter_context(stream)


def _open_device(stack: ExitStack, options: Options) -> BinaryIO:
    if not options.device_path:
        path, stream = open_default_device()
        options.device_path = path
        return stack.enter_context(stream)
    try:
        stream = open(options.device_path, "rb", buffering=0)
    except OSError as exc:
        raise UsageError(ERR_CHK_DEV) from exc
    stack.enter_context(stream)
    try:
        is_char = stat.S_ISCHR(os.fstat(stream.fileno()).st_mode)
    except OSError as exc:
        raise UsageError(ERR_CHK_DEV) from exc
    if not is_char:
        raise UsageError(ERR_CHK_DEV)
    return stream


def _run(options: Options, device: BinaryIO, stack: ExitStack) -> None:
    command = options.command
    if command is Command.GENERATE:
        if options.alternate:
            clear = _open(stack, options.input_path, "rb", ERR_FOPEN_INPUT)
            encrypted = _open(stack, options.encrypted_path, "rb", ERR_FOPEN_ENCRYPTED)
            otp = _open(stack, options.otp_path, "wb", ERR_FOPEN_OTP)
            generate_deniable(clear, encrypted, otp, device, None, options.fill)
        else:
            otp = _open(stack, options.otp_path, "wb", ERR_FOPEN_OTP)
            generate(device, otp, options.size)
    elif command is Command.ENCRYPT:
        clear = _open(stack, options.input_path, "rb", ERR_FOPEN_INPUT)
        if options.alternate:
            otp = _open(stack, options.otp_path, "wb", ERR_FOPEN_OTP)
            output = _open(stack, options.output_path, "wb", ERR_FOPEN_OUTPUT)
            encrypt_new_pad(clear, device, otp, output)
        else:
            otp = _open(stack, options.otp_path, "rb", ERR_FOPEN_OTP)
            output = _open(stack, options.output_path, "wb", ERR_FOPEN_OUTPUT)
            encrypt(clear, otp, output)
    elif command is Command.DECRYPT:
        encrypted = _open(stack, options.input_path, "rb", ERR_FOPEN_INPUT)
        otp = _open(stack, options.otp_path, "rb", ERR_FOPEN_OTP)
        output = _open(stack, options.output_path, "wb", ERR_FOPEN_OUTPUT)
        check_decrypt_size(options.size, options.input_path, options.otp_path)
        decrypt(encrypted, otp, output, options.size)
    else:
        otp = _open(stack, options.otp_path, "rb", ERR_FOPEN_OTP)
        result = assess(otp, options.binary)
        if options.alternate:
            report = _open(stack, options.output_path, "w", ERR_FOPEN_OUTPUT)
            report.write(terse_report(result, options.binary))
        else:
            sys.stdout.write(detailed_report(result, options.binary))


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the process exit status."""
    if argv is None:
        args = sys.argv[1:]
        progname = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else DEFAULT_PROGNAME
    else:
        args = list(argv)
        progname = DEFAULT_PROGNAME

    try:
        options = parse_args(args)
        with ExitStack() as stack:
            device = _open_device(stack, options)
            if options.verbose:
                sys.stdout.write(describe_start(options, progname))
            _run(options, device, stack)
            if options.verbose:
                sys.stdout.write(describe_end(options))
    except UsageError as exc:
        if exc.show_usage:
            sys.stdout.write(usage_text(progname))
        else:
            print(exc.message, file=sys.stderr)
        return 1
    except PadError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"{ERR_CLOSE}{exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())