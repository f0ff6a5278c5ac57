import csv
import io
import os
import sys

import requests

from mcbayes.constants import DATA_URL, REQUIRED_COLS, data_path


def fetch_howell(url=DATA_URL):
    """Download the Howell1 census and return its text, checking the header first."""
    print(f"  Fetching {url} ...")
    resp = requests.get(url, timeout=60)
    resp.raise_for_status()
    text = resp.text

    reader = csv.reader(io.StringIO(text), delimiter=";")
    header = [h.strip().strip('"') for h in next(reader, [])]
    missing = [c for c in REQUIRED_COLS if c not in header]
    if missing:
        raise ValueError(f"downloaded file is missing columns: {', '.join(missing)}")
    n_rows = sum(1 for row in reader if row)
    print(f"  -> {n_rows:,} people, columns: {', '.join(header)}")
    return text


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    out_path = argv[0] if argv else data_path()

    text = fetch_howell()
    os.makedirs(os.path.dirname(os.path.abspath(out_path)), exist_ok=True)
    with open(out_path, "w", newline="") as f:
        f.write(text)

    print(f"\nDone! Wrote {out_path}")


if __name__ == "__main__":
    main()
