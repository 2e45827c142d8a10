# enoch

One-time pad management from the command line. It generates pads from a
random device, encrypts and decrypts with them, and assesses how random a pad
looks. It also builds a pad that turns an existing encrypted file into a chosen
clear file, for plausible deniability.

The command is `er` ("Encrypt Right" / "Enoch Root").

## Installing

    pip install .

The package has no dependencies outside the standard library. To run the
tests, install the `test` extra and run `pytest`.

## Commands

Give exactly one of `-G`, `-E`, `-D` or `-P`. A second one is an error.

### Generate

Generate a new pad of a given size. The size may end in `K`, `M` or `G`, in
either case:

    er -G -s1M -pnew.otp

Without `-s`, the command builds a deniable pad from a clear file and an
existing encrypted file. Each pad byte is the clear byte XORed with the
encrypted byte. The encrypted file must be at least as long as the clear file.

    er -G -iclear.in -eexisting.enc -pnew.otp -f

`-f` pads the new pad with random bytes up to the encrypted file's size.
`-f` is accepted only with this form of `-G`.

### Encrypt

    er -E -iclear.in -pexisting.otp -oencrypted.out
    er -E -iclear.in -pnew.otp -oencrypted.out

When the pad file can be read, it is used as the pad, and it must be at least
as long as the clear file. When it cannot be read, for example because it does
not exist yet, a new pad is written to that path from the random device while
encrypting.

### Decrypt

    er -D -iencrypted.in -pexisting.otp -oclear.out
    er -D -iencrypted.in -pexisting.otp -oclear.out -s1M

With `-s`, only that many bytes are decrypted. The size must not exceed the
size of either the encrypted file or the pad.

### Assess

Assess a pad's randomness: entropy, chi-square, arithmetic mean, a Monte Carlo
value for pi and the serial correlation coefficient.

    er -P -pexisting.otp
    er -P -pexisting.otp -oterse.rpt -b

Without `-o`, a detailed report with PASS/FAIL verdicts goes to standard output.
With `-o`, a terse two-line comma-separated report is written to the file. `-b`
works on bits instead of bytes and is accepted only with `-P`.

### Other options

- `-r DEVICE`: the random device to read. A name without a leading `/` is
  looked up under `/dev/`. It must be a character device. Without `-r`,
  `/dev/TrueRNG` is tried first, then `/dev/random`.
- `-v`: verbose output. Describes the run before it starts and lists the files
  and size used when it ends.
- `-h`: print usage.

`er` exits with status 0 on success and 1 on any error. Error messages go to
standard error.

## Using it from Python

```python
from enoch.randomness import assess
from enoch.report import judge, terse_report, detailed_report

with open("existing.otp", "rb") as pad:
    result = assess(pad, binary=False)

print(result.count, result.entropy, result.chisq, result.mean,
      result.montepi, result.scc)
verdict = judge(result, binary=False)
print(verdict.overall)
print(terse_report(result, binary=False))
```

- `enoch.randomness`: `assess` takes bytes or a binary stream. The result is a
  `PyxResult`. `PyxAccumulator` gathers the statistics incrementally through
  `add` and `finish`. `pochisq` and `poz` give chi-square and normal
  probabilities.
- `enoch.report`: `judge` returns a `Verdict`. `terse_report` and
  `detailed_report` return report text.
- `enoch.pad` holds the streaming operations behind the commands:
  - `generate`
  - `generate_deniable`
  - `encrypt`
  - `encrypt_new_pad`
  - `decrypt`
  - `check_decrypt_size`
  - `open_default_device`

  They raise `PadError` when a pad or encrypted file is too short, the input is
  empty, or the random device cannot be read.
- `enoch.cli`: `parse_args` turns arguments into `Options` or raises
  `UsageError`. `parse_size` reads sizes. `main` runs the command.

## What it does not do

Pads are plain files. There is no key store and no tracking of which pad bytes
have already been used, so keeping a pad from being reused is left to the user.