"""
Practice problem generation and answer checking.

Problems come from fixed templates per (subject, grade). Math and physics
templates are filled with random parameters; the other subjects draw from
small question banks. Pass a seeded `random.Random` for repeatable output.
"""

import math
import operator
import random
import re
import uuid
from typing import Callable, Dict, List, Optional, Tuple

from edusphere.schemas.problem import Grade, Problem, Subject

NUMERIC_TOLERANCE = 0.01
NUMERIC_SUBJECTS = frozenset({Subject.MATH, Subject.PHYSICS})

# Leading number, as a browser's parseFloat would read it
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

ADVANCED_GRADES = (Grade.HIGH, Grade.MATRIC)


def _fixed(value: float, places: int = 2) -> str:
    text = f"{value:.{places}f}"
    # "-0.00" reads badly and parses the same as "0.00"
    return text[1:] if text.startswith("-") and float(text) == 0 else text


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(value)


def _nonzero(rng: random.Random, low: int, high: int) -> int:
    while True:
        value = rng.randint(low, high)
        if value != 0:
            return value


def _new_id() -> str:
    return uuid.uuid4().hex[:16]


# ─── Math ────────────────────────────────────────────────────────────────────

_ARITHMETIC = {"+": operator.add, "-": operator.sub, "*": operator.mul}


def _math_problem(grade: Grade, rng: random.Random) -> Tuple[str, str]:
    if grade == Grade.KINDERGARTEN:
        a, b = rng.randint(1, 5), rng.randint(1, 5)
        return f"{a} + {b} = ?", str(a + b)

    if grade == Grade.PRIMARY:
        symbol = rng.choice(list(_ARITHMETIC))
        a, b = rng.randint(1, 20), rng.randint(1, 10)
        return f"{a} {symbol} {b} = ?", str(_ARITHMETIC[symbol](a, b))

    if grade == Grade.MIDDLE:
        kind = rng.choice(["fraction", "decimal", "percentage"])
        if kind == "fraction":
            numerator, denominator = rng.randint(1, 10), _nonzero(rng, 2, 10)
            return (
                f"What is {numerator}/{denominator} as a decimal? (Round to 2 decimal places)",
                _fixed(numerator / denominator),
            )
        if kind == "decimal":
            decimal = _fixed(rng.random() * 10)
            return f"What is {decimal} as a percentage?", _fixed(float(decimal) * 100, 0)
        percentage, value = rng.randint(1, 100), rng.randint(50, 249)
        return f"What is {percentage}% of {value}?", _fixed(percentage / 100 * value)

    kind = rng.choice(["quadratic", "linear", "area", "trigonometry"])
    if kind == "quadratic":
        a = _nonzero(rng, 1, 5)
        b, c = rng.randint(-5, 4), rng.randint(-5, 4)
        discriminant = b * b - 4 * a * c
        if discriminant < 0:
            return (
                f"Solve the quadratic equation: {a}x² + {b}x + {c} = 0. Express in terms of i.",
                f"({-b}±{_number(math.sqrt(-discriminant))}i)/{2 * a}",
            )
        root = math.sqrt(discriminant)
        larger = max((-b + root) / (2 * a), (-b - root) / (2 * a))
        return (
            f"Solve the quadratic equation: {a}x² + {b}x + {c} = 0. "
            "If there are two solutions, give the larger one.",
            _fixed(larger),
        )
    if kind == "linear":
        m = _nonzero(rng, 1, 5)
        c, x = rng.randint(-5, 4), rng.randint(-5, 4)
        return f"If f(x) = {m}x + {c}, what is f({x})?", str(m * x + c)
    if kind == "area":
        radius = rng.randint(1, 10)
        return (
            f"What is the area of a circle with radius {radius} units? "
            "(Use π = 3.14, round to 2 decimal places)",
            _fixed(3.14 * radius * radius),
        )
    angle = rng.choice([30, 45, 60])
    return (
        f"What is the sine of {angle} degrees? (Round to 2 decimal places)",
        _fixed(math.sin(math.radians(angle))),
    )


# ─── Physics ─────────────────────────────────────────────────────────────────

_PHYSICS_CONCEPTS = [
    ("If you drop a rock and a feather at the same time on Earth, which will hit the ground first?", "rock"),
    ("What poles of magnets attract each other?", "opposite poles"),
    ("What color is created when all colors of light mix together?", "white"),
    ("Does sound travel faster in air or water?", "water"),
]


def _physics_problem(grade: Grade, rng: random.Random) -> Tuple[str, str]:
    if grade == Grade.KINDERGARTEN:
        return "What makes things fall to the ground?", "gravity"

    if grade == Grade.PRIMARY:
        return rng.choice(_PHYSICS_CONCEPTS)

    if grade == Grade.MIDDLE:
        kind = rng.choice(["speed", "force", "energy"])
        if kind == "speed":
            distance, time = rng.randint(50, 149), _nonzero(rng, 5, 20)
            return (
                f"If a car travels {distance} meters in {time} seconds, what is its average speed in m/s?",
                _fixed(distance / time),
            )
        if kind == "force":
            mass, acceleration = rng.randint(1, 10), rng.randint(1, 10)
            return (
                f"If a {mass} kg object accelerates at {acceleration} m/s², "
                "what is the force applied (in Newtons)?",
                _fixed(mass * acceleration),
            )
        mass, height = rng.randint(1, 10), rng.randint(5, 24)
        return (
            f"What is the potential energy of a {mass} kg object at a height of {height} meters? "
            "(Use g = 9.8 m/s², round to 2 decimal places)",
            _fixed(mass * 9.8 * height),
        )

    kind = rng.choice(["kinematics", "electricity", "waves", "thermodynamics"])
    if kind == "kinematics":
        velocity = rng.randint(0, 19)
        acceleration, time = _nonzero(rng, 1, 5), _nonzero(rng, 2, 10)
        return (
            f"If an object starts with an initial velocity of {velocity} m/s and accelerates at "
            f"{acceleration} m/s², how far will it travel in {time} seconds?",
            _fixed(velocity * time + 0.5 * acceleration * time * time),
        )
    if kind == "electricity":
        voltage, resistance = _nonzero(rng, 5, 20), _nonzero(rng, 2, 10)
        return (
            f"What current will flow through a {resistance} Ω resistor connected to a "
            f"{voltage} V battery? (in Amperes)",
            _fixed(voltage / resistance),
        )
    if kind == "waves":
        frequency = _nonzero(rng, 10, 100)
        return (
            f"If a wave has a frequency of {frequency} Hz and travels at 340 m/s "
            "(speed of sound in air), what is its wavelength in meters?",
            _fixed(340 / frequency),
        )
    mass, change = _nonzero(rng, 1, 5), _nonzero(rng, 10, 50)
    return (
        f"How much heat energy is required to raise the temperature of {mass} kg of water by "
        f"{change}°C? (Specific heat capacity of water = 4184 J/kg°C)",
        _fixed(mass * 4184 * change),
    )


# ─── Question banks ──────────────────────────────────────────────────────────
# Entries are (question, answer) or (question, answer, options).

BankEntry = Tuple
Bank = Dict[Grade, List[BankEntry]]


def _advanced(entries: List[BankEntry]) -> Dict[Grade, List[BankEntry]]:
    return {grade: entries for grade in ADVANCED_GRADES}


ENGLISH_BANK: Bank = {
    Grade.KINDERGARTEN: [
        ("Fill in the missing letter(s) to complete the word: c__", "a"),
        ("Fill in the missing letter(s) to complete the word: __g", "do"),
        ("Fill in the missing letter(s) to complete the word: s__", "un"),
        ("Fill in the missing letter(s) to complete the word: _at", "h"),
        ("Fill in the missing letter(s) to complete the word: p__", "en"),
    ],
    Grade.PRIMARY: [
        ("Choose the correct word: She ___ to school every day.", "goes", ["go", "goes", "going", "gone"]),
        ("Which word is spelled correctly?", "receive", ["recieve", "receive", "receve", "reciave"]),
        ("What is the plural of 'child'?", "children", ["childs", "childen", "children", "childrens"]),
    ],
    Grade.MIDDLE: [
        (
            "Identify the part of speech for the underlined word: She spoke _very_ softly.",
            "adverb",
            ["noun", "verb", "adjective", "adverb"],
        ),
        (
            "What literary device is used in: 'The wind whispered through the trees'?",
            "personification",
            ["simile", "metaphor", "personification", "hyperbole"],
        ),
        (
            "Choose the correct form: If I ___ earlier, I would have caught the bus.",
            "had left",
            ["leave", "left", "had left", "would leave"],
        ),
    ],
    **_advanced([
        (
            "Which of these is an example of dramatic irony?",
            "The audience knows something a character doesn't",
            [
                "A character making a joke",
                "The audience knows something a character doesn't",
                "A surprising plot twist",
                "A coincidence in the story",
            ],
        ),
        (
            "Identify the rhetorical device: 'Ask not what your country can do for you, "
            "ask what you can do for your country.'",
            "chiasmus",
            ["anaphora", "chiasmus", "parallelism", "antithesis"],
        ),
        (
            "Which sentence uses the subjunctive mood correctly?",
            "I wish I were taller",
            ["I wish I was taller", "I wish I were taller", "I wish I would be taller", "I wish I am taller"],
        ),
    ]),
}

CODING_BANK: Bank = {
    Grade.KINDERGARTEN: [
        ("Which block would make the robot move forward?", "Forward"),
        ("To make the robot turn right, which block should you use?", "Turn Right"),
        ("If you want the robot to pick up an object, which command should you use?", "Grab"),
    ],
    Grade.PRIMARY: [
        ("What would this code do? repeat 4 times { move forward, turn right }", "Draw a square"),
        ("How many times would 'Hello' be printed? repeat 3 times { print 'Hello' }", "3"),
        ("To repeat an action 10 times, what kind of structure should you use?", "loop"),
    ],
    Grade.MIDDLE: [
        ("What value is in the variable 'x' after this code runs?\nx = 5\nx = x * 2\nx = x + 3", "13"),
        (
            "What's wrong with this code?\nfunction calculateArea(width, height) {\n  return width + height\n}",
            "It adds instead of multiplying",
        ),
        (
            "What will this return?\nfunction mystery(n) {\n  if (n <= 1) return n;\n"
            "  return mystery(n-1) + mystery(n-2);\n}\nmystery(4)",
            "3",
        ),
    ],
    **_advanced([
        ("What's the time complexity of searching an element in a balanced binary search tree?", "O(log n)"),
        (
            "What will this Python code output?\ndef recursive_sum(n):\n  if n <= 1:\n    return n\n"
            "  else:\n    return n + recursive_sum(n-1)\n\nprint(recursive_sum(5))",
            "15",
        ),
        (
            "In JavaScript, what does the following code return?\n"
            "[1, 2, 3, 4, 5].filter(num => num % 2 === 0).map(num => num * 2)",
            "[4, 8]",
        ),
    ]),
}

HISTORY_BANK: Bank = {
    Grade.KINDERGARTEN: [
        ("Which holiday celebrates independence?", "Independence Day",
         ["Independence Day", "Halloween", "Valentine's Day", "Easter"]),
        ("What do we call people who lived a long time ago?", "ancestors",
         ["ancestors", "neighbors", "friends", "teachers"]),
        ("What color was the first American flag?", "red, white, and blue",
         ["red, white, and blue", "green and yellow", "purple and pink", "black and white"]),
    ],
    Grade.PRIMARY: [
        ("Who was the first president of the United States?", "George Washington",
         ["George Washington", "Abraham Lincoln", "Thomas Jefferson", "John Adams"]),
        ("What was the name of the ship that brought the Pilgrims to America?", "Mayflower",
         ["Mayflower", "Santa Maria", "Titanic", "Queen Elizabeth"]),
        ("Which war was fought between the North and South in the United States?", "Civil War",
         ["Civil War", "World War I", "Revolutionary War", "War of 1812"]),
    ],
    Grade.MIDDLE: [
        ("Which ancient civilization built the pyramids in Egypt?", "Ancient Egyptians",
         ["Ancient Egyptians", "Romans", "Greeks", "Persians"]),
        ("What was the main cause of World War I?", "Assassination of Archduke Franz Ferdinand",
         ["Assassination of Archduke Franz Ferdinand", "The Great Depression", "Colonial disputes",
          "Religious conflicts"]),
        ("Which empire was ruled by Genghis Khan?", "Mongol Empire",
         ["Mongol Empire", "Roman Empire", "Ottoman Empire", "Byzantine Empire"]),
    ],
    **_advanced([
        ("What ideology was at the center of the Cold War conflict?", "Communism vs. Capitalism",
         ["Communism vs. Capitalism", "Democracy vs. Monarchy", "Fascism vs. Liberalism",
          "Imperialism vs. Nationalism"]),
        ("Which agreement ended World War I?", "Treaty of Versailles",
         ["Treaty of Versailles", "Congress of Vienna", "Treaty of Westphalia", "Peace of Augsburg"]),
        ("What was a major effect of the Industrial Revolution?", "Urbanization",
         ["Urbanization", "Decrease in population", "Decline in technology", "Reduced international trade"]),
    ]),
}

# Science and geography share one bank across grades
SCIENCE_QUESTIONS: List[BankEntry] = [
    ("What is the closest planet to the sun?", "Mercury"),
    ("What is the chemical symbol for water?", "H2O"),
    ("What type of cell contains chloroplasts?", "Plant cell"),
]

GEOGRAPHY_QUESTIONS: List[BankEntry] = [
    ("What is the capital of France?", "Paris"),
    ("Which continent is Egypt in?", "Africa"),
    ("What is the longest river in the world?", "Nile"),
]


# ─── Hints ───────────────────────────────────────────────────────────────────

def _hints(kindergarten: str, primary: str, middle: str, advanced: str) -> Dict[Grade, str]:
    return {
        Grade.KINDERGARTEN: kindergarten,
        Grade.PRIMARY: primary,
        Grade.MIDDLE: middle,
        Grade.HIGH: advanced,
        Grade.MATRIC: advanced,
    }


HINTS: Dict[Subject, Dict[Grade, str]] = {
    Subject.MATH: _hints(
        "Count carefully using your fingers!",
        "Remember the order of operations: multiply and divide before add and subtract.",
        "For fractions to decimals, divide the numerator by the denominator.",
        "For quadratic equations, use the formula: x = (-b ± √(b² - 4ac)) / 2a",
    ),
    Subject.PHYSICS: _hints(
        "Think about what pulls you down when you jump!",
        "Remember, opposite poles attract in magnets.",
        "Speed = Distance ÷ Time",
        "For motion problems, remember: d = vᵢt + ½at²",
    ),
    Subject.ENGLISH: _hints(
        "Try saying the word out loud and listen for the missing sound.",
        "Remember the 'i before e except after c' rule for spelling.",
        "Adverbs often end in -ly and describe verbs.",
        "In dramatic irony, the audience knows something the characters don't.",
    ),
    Subject.CODING: _hints(
        "Think about which direction the robot needs to move!",
        "A loop repeats the same actions multiple times.",
        "Variables store values that can change during the program.",
        "Remember that time complexity measures how the runtime increases with input size.",
    ),
    Subject.HISTORY: _hints(
        "Think about special days we celebrate!",
        "Presidents are leaders of a country.",
        "The pyramids were tombs for Egyptian pharaohs.",
        "The Cold War was an ideological conflict between the US and USSR.",
    ),
    Subject.SCIENCE: _hints(*["Think about the solar system structure."] * 4),
    Subject.GEOGRAPHY: _hints(*["Look at a map of the world."] * 4),
}


# ─── Public API ──────────────────────────────────────────────────────────────

def _from_bank(entries: List[BankEntry], rng: random.Random) -> Tuple[str, str, Optional[List[str]]]:
    entry = rng.choice(entries)
    options = list(entry[2]) if len(entry) > 2 else None
    return entry[0], entry[1], options


_GENERATED: Dict[Subject, Callable[[Grade, random.Random], Tuple[str, str]]] = {
    Subject.MATH: _math_problem,
    Subject.PHYSICS: _physics_problem,
}

_BANKS: Dict[Subject, Bank] = {
    Subject.ENGLISH: ENGLISH_BANK,
    Subject.CODING: CODING_BANK,
    Subject.HISTORY: HISTORY_BANK,
    Subject.SCIENCE: {grade: SCIENCE_QUESTIONS for grade in Grade},
    Subject.GEOGRAPHY: {grade: GEOGRAPHY_QUESTIONS for grade in Grade},
}


def generate_problem(subject: Subject, grade: Grade, rng: Optional[random.Random] = None) -> Problem:
    """Build one problem for the subject and grade."""
    rng = rng or random.Random()
    subject, grade = Subject(subject), Grade(grade)

    options = None
    if subject in _GENERATED:
        question, answer = _GENERATED[subject](grade, rng)
    else:
        question, answer, options = _from_bank(_BANKS[subject][grade], rng)

    return Problem(
        id=_new_id(),
        question=question,
        answer=answer,
        options=options,
        hint=HINTS[subject][grade],
    )


def parse_leading_number(text: str) -> Optional[float]:
    match = _LEADING_NUMBER.match(text or "")
    if not match:
        return None
    return float(match.group(1))


def check_answer(subject: Subject, user_answer: str, correct_answer: str) -> bool:
    """
    Math and physics answers match when both read as numbers within 0.01
    of each other. Everything else is a trimmed, case-insensitive comparison.
    """
    if Subject(subject) in NUMERIC_SUBJECTS:
        given = parse_leading_number(user_answer)
        expected = parse_leading_number(correct_answer)
        if given is None or expected is None:
            return False
        return abs(given - expected) < NUMERIC_TOLERANCE
    return (user_answer or "").strip().lower() == (correct_answer or "").strip().lower()
