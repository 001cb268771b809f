from pathlib import Path
import sys

# Import the in-tree package ahead of any installed ethyl
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
