"""
Convert photon-field and loss tables from ASCII to binary NumPy format.

TabularPhotonField, InteractionLossTable and NuclearMassTable pick up a
.npy file next to the text table automatically. Worth doing before
multiprocess runs, where every worker loads the tables.
"""

import sys
import time
from pathlib import Path

import numpy as np

# Add parent directory to path to import uhecr_mc
sys.path.insert(0, str(Path(__file__).parent.parent))

from uhecr_mc.io.tables import PACKAGE_DATA_DIR


def convert_txt_to_npy(data_dir=None):
    """Convert all .txt tables in data_dir to .npy format."""
    data_path = Path(data_dir) if data_dir is not None else PACKAGE_DATA_DIR

    if not data_path.exists():
        print(f"Error: {data_path} does not exist")
        return

    txt_files = list(data_path.glob('*.txt'))

    if not txt_files:
        print(f"No .txt files found in {data_path}")
        return

    print(f"Found {len(txt_files)} tables")
    print(f"Converting ASCII → binary NumPy format...\n")

    total_time_ascii = 0
    total_time_binary = 0

    for txt_file in sorted(txt_files):
        print(f"Processing: {txt_file.name}")

        start = time.time()
        data = np.loadtxt(txt_file, comments='#')
        time_ascii = time.time() - start
        total_time_ascii += time_ascii
        print(f"  ASCII load: {time_ascii*1000:.1f}ms (shape {data.shape})")

        npy_file = txt_file.with_suffix('.npy')
        np.save(npy_file, data)

        start = time.time()
        loaded = np.load(npy_file)
        time_binary = time.time() - start
        total_time_binary += time_binary
        print(f"  Binary load: {time_binary*1000:.1f}ms")

        if not np.array_equal(data, loaded):
            raise RuntimeError(f"Data mismatch after conversion: {npy_file}")

        print(f"  ✓ Saved: {npy_file.name}\n")

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print(f"Files converted: {len(txt_files)}")
    print(f"Total ASCII load time: {total_time_ascii*1000:.1f}ms")
    print(f"Total binary load time: {total_time_binary*1000:.1f}ms")


if __name__ == "__main__":
    convert_txt_to_npy(sys.argv[1] if len(sys.argv) > 1 else None)
