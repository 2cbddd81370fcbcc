"""
# Data File I/O

This module provides the in-memory data-file structure consumed by the
sampling functions, along with a reader and writer for its text form.

## Classes

- `DatList`: Dictionary of data-file sections (scalars, vectors and tables)

## Functions

- `read_dat`: Parse a data file into a `DatList`
- `write_dat`: Write a `DatList` back to disk

## File Layout

Each section starts with a `#_<name>` line. Scalar sections hold a single
number. Vector sections start with a `#V` line followed by one line of
whitespace-separated numbers, so a one-element vector stays a list. Table
sections start with a `#C <column names>` line, hold one row per line and end
with `-9999`. Unmarked lines with several numbers are read as vectors.

```
#_styr
1
#_fleet_units
#V
1 1
#_CPUEinfo
#C Fleet Units Errtype SD_Report
1 1 0 0
2 1 0 0
-9999
#_N_cpue
2
#_CPUE
#C year seas index obs se_log
76 1 2 1.5e9 0.1
78 1 2 1.4e9 0.1
-9999
```

## Example Usage

```python
from ss3sim_tools.utils.datfile import read_dat, write_dat

dat = read_dat("ss3_expected_values.dat")
dat["CPUE"].head()
write_dat(dat, "ss3.dat")
```
"""

import io
import os
import re
import copy
import numbers

import pandas as pd


TABLE_END = "-9999"
"""Line marking the end of a table section."""

VECTOR_MARK = "#V"
"""Line marking a vector section."""

CPUE_COLUMNS = ["year", "seas", "index", "obs", "se_log"]
"""Column order of the abundance index table."""

_SECTION = re.compile(r"^#_(\w+)\s*$")


class DatList(dict):
    """
    Sections of a data file keyed by section name.

    Values are ints or floats for scalar sections, lists for vector sections
    and pandas DataFrames for table sections. The sampling functions need the
    `CPUE`, `CPUEinfo` and `N_cpue` sections; all others are carried through
    untouched.

    Example:
        ```python
        dat = DatList({
            "N_cpue": 1,
            "CPUE": pd.DataFrame(
                [[76, 1, 2, 1.5e9, 0.1]],
                columns=CPUE_COLUMNS
            )
        })
        replicate = dat.copy()
        ```
    """

    def copy(self) -> "DatList":
        """Return a deep copy so tables can be modified independently."""
        return DatList(copy.deepcopy(dict(self)))


def _parse_number(token: str) -> int | float:
    try:
        return int(token)
    except ValueError:
        return float(token)


def _parse_table(columns: list[str], rows: list[str]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.read_csv(
        io.StringIO("\n".join(rows)),
        sep=r"\s+",
        header=None,
        names=columns
    )


def read_dat(infile: str) -> DatList:
    """
    Read a data file into a `DatList`.

    Args:
        infile (str): Path to the data file.

    Returns:
        DatList: Parsed sections in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If a table is not terminated or a section has no value.
    """
    with open(infile, "r") as f:
        lines = [line.strip() for line in f]

    dat = DatList()
    name = None
    columns = None
    vector = False
    rows = []

    for lineno, line in enumerate(lines, start=1):
        if columns is not None:
            if line == TABLE_END:
                dat[name] = _parse_table(columns, rows)
                name, columns, rows = None, None, []
            elif line and not line.startswith("#"):
                rows.append(line)
            continue

        if not line:
            continue

        if (match := _SECTION.match(line)) is not None:
            if vector:
                # Empty vector
                dat[name] = []
            elif name is not None:
                raise ValueError(f"Section '{name}' has no value (line {lineno})")
            name = match.group(1)
            vector = False
        elif line.startswith("#C ") and name is not None:
            columns = line[2:].split()
        elif line == VECTOR_MARK and name is not None:
            vector = True
        elif line.startswith("#"):
            continue
        elif name is not None:
            values = [_parse_number(t) for t in line.split()]
            dat[name] = values if vector or len(values) > 1 else values[0]
            name = None
            vector = False
        else:
            raise ValueError(f"Value outside of a section at line {lineno}: {line}")

    if columns is not None:
        raise ValueError(f"Table '{name}' is missing its {TABLE_END} terminator")
    if vector:
        dat[name] = []
    elif name is not None:
        raise ValueError(f"Section '{name}' has no value")

    return dat


def write_dat(dat: dict, outfile: str, overwrite: bool = True):
    """
    Write a data-file structure to disk.

    Args:
        dat (dict): Sections to write, typically a `DatList`.
        outfile (str): Destination path.
        overwrite (bool, optional): Replace an existing file. Defaults to True.

    Raises:
        FileExistsError: If the file exists and overwrite is False.
        TypeError: If a section holds a value that cannot be written.
    """
    if not overwrite and os.path.exists(outfile):
        raise FileExistsError(f"{outfile} already exists and overwrite is False")

    parts = []
    for name, value in dat.items():
        parts.append(f"#_{name}\n")
        if isinstance(value, pd.DataFrame):
            parts.append("#C " + " ".join(str(c) for c in value.columns) + "\n")
            if len(value) > 0:
                parts.append(value.to_csv(sep=" ", header=False, index=False))
            parts.append(TABLE_END + "\n")
        elif isinstance(value, (list, tuple)):
            parts.append(VECTOR_MARK + "\n")
            if len(value) > 0:
                parts.append(" ".join(str(v) for v in value) + "\n")
        elif isinstance(value, numbers.Number):
            parts.append(f"{value}\n")
        else:
            raise TypeError(f"Cannot write section '{name}' of type {type(value).__name__}")

    with open(outfile, "w") as f:
        f.write("".join(parts))
