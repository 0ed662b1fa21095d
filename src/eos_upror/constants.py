APP_TITLE = "EOS UPROR Calculator"
APP_DESCRIPTION = (
    "This calculator uses a logistic regression machine learning model to calculate an early-onset "
    "scoliosis (EOS) patient's risk of experiencing an unplanned return to the operating room (UPROR) "
    "over their treatment course."
)
RESULT_LABEL = "Predicted UPROR Risk"

DEFAULT_MODEL_PATH = "models/upror_growing.onnx"
PROBABILITIES_OUTPUT = "probabilities"
# Output column order of the exported classifier: [no UPROR, UPROR]
POSITIVE_CLASS_INDEX = 1
ONNX_OPSET = 17
