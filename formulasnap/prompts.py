from formulasnap.models import Mode

RECOGNITION_PROMPTS: dict[Mode, str] = {
    Mode.FORMULA: (
        "Recognize the math formula in the image. Return only the raw LaTeX code: "
        "do not wrap it in a markdown code block, do not add $ delimiters, do not explain."
    ),
    Mode.OCR: (
        "Recognize all text in the image and keep the original layout. "
        "Return only the recognized text, do not explain."
    ),
    Mode.DOCUMENT: (
        "Recognize everything in the image (text, formulas, tables) and return it as Markdown. "
        "Wrap inline formulas in $...$ and display formulas in $$...$$, use Markdown table syntax "
        "for tables, and keep the original structure. Do not explain."
    ),
}

VERIFY_PROMPT = (
    "Check the following LaTeX formula against the image. If it is correct, return it unchanged; "
    "if it has errors, return the corrected formula. Return only the final raw LaTeX code, "
    "do not explain.\n\n"
    "Recognition result: {formula}"
)


def recognition_prompt(mode: Mode) -> str:
    return RECOGNITION_PROMPTS[mode]


def verification_prompt(formula: str) -> str:
    return VERIFY_PROMPT.format(formula=formula)
