from pathlib import Path

_TEST_ROOT = Path(__file__).parent  # root of test folder
_PROJECT_ROOT = _TEST_ROOT.parent  # root of project
_FRONTEND_PATH = _PROJECT_ROOT / "frontend.py"  # streamlit app
_MODELS_PATH = _PROJECT_ROOT / "models"  # root of models
