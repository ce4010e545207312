"""
Built-in assessment definitions

Question wording, option labels and documented severity bands are copied
from the published instruments as the practice presents them. Band ranges
are authoritative and are not re-derived from the scoring formula.
"""

from .schema import QuizDefinition, TriageBranch


# =============================================================================
# SHARED OPTION SETS
# =============================================================================

SNOT22_OPTIONS = [
    "Never (0)", "Rarely (1)", "Sometimes (2)", "Often (3)", "Very Often (4)", "Constantly (5)",
]

SNOT12_OPTIONS = [
    "0 - No problem",
    "1 - Very Mild Problem",
    "2 - Mild or Slight Problem",
    "3 - Moderate Problem",
    "4 - Severe Problem",
    "5 - Problem as Bad as it Can Be",
]

HANDICAP_OPTIONS = ["Yes (4)", "Sometimes (2)", "No (0)"]

EPWORTH_OPTIONS = [
    "Would never doze (0)",
    "Slight chance of dozing (1)",
    "Moderate chance of dozing (2)",
    "High chance of dozing (3)",
]

STOP_OPTIONS = ["Yes (1)", "No (0)"]

TNSS_OPTIONS = [
    "0 – NO Symptoms",
    "1 – MILD Symptoms present but easily tolerated",
    "2 – MODERATE Symptoms present and bothersome, but tolerable",
    "3 – SEVERE Symptoms present and interfere with activities of daily living and/or sleep",
]

MIDAS_OPTIONS = ["Never (0)", "Rarely (1)", "Sometimes (2)", "Very Often (3)", "All of the Time (4)"]

SLEEP_CHECK_OPTIONS = [
    "Not at all (0)",
    "Several days (1)",
    "More than half the days (2)",
    "Nearly every day (3)",
]

# NOSE items are scored 0, 5, 10, 15, 20 so five answers span 0-100
NOSE_POINTS = [0, 5, 10, 15, 20]


def nose_options(subject: str) -> list[dict]:
    """Five NOSE grades for one subject, carrying their explicit point values."""
    grades = ["NO", "MILD", "MODERATE", "FAIRLY BAD", "SEVERE"]
    return [
        {"label": f"{i} – {grade} {subject}", "value": NOSE_POINTS[i]}
        for i, grade in enumerate(grades)
    ]


def _questions(texts: list[str], options: list) -> list[dict]:
    return [
        {"id": str(i), "text": text, "options": list(options)}
        for i, text in enumerate(texts, start=1)
    ]


# =============================================================================
# DEFINITIONS
# =============================================================================

SNOT22 = {
    "id": "SNOT22",
    "title": "SNOT-22",
    "description": "Comprehensive evaluation of sinus and nasal symptoms",
    "max_score": 110,
    "scoring": {
        "normal": "Normal (0-20): Minimal symptoms",
        "mild": "Mild (21-50): Mild symptoms affecting quality of life",
        "moderate": "Moderate (51-80): Moderate symptoms requiring attention",
        "severe": "Severe (81-110): Severe symptoms requiring immediate medical attention",
    },
    "questions": _questions(
        [
            "How often do you experience nasal congestion?",
            "How often do you experience runny nose?",
            "How often do you experience post-nasal discharge?",
            "How often do you experience thick nasal discharge?",
            "How often do you experience loss of smell/taste?",
            "How often do you experience cough?",
            "How often do you experience ear fullness?",
            "How often do you experience dizziness?",
            "How often do you experience ear pain?",
            "How often do you experience facial pain/pressure?",
            "How often do you have difficulty falling asleep?",
            "How often do you wake up at night?",
            "How often do you lack a good night's sleep?",
            "How often do you wake up tired?",
            "How often are you fatigued during the day?",
            "How often do you have reduced productivity?",
            "How often do you have reduced concentration?",
            "How often are you frustrated/restless/irritable?",
            "How often are you sad?",
            "How often are you embarrassed by your condition?",
            "How often do you avoid spending time with others?",
            "How often do you experience difficulty breathing through your nose?",
        ],
        SNOT22_OPTIONS,
    ),
}

NOSE = {
    "id": "NOSE",
    "title": "NOSE Score",
    "description": "Quick Nasal Obstruction Evaluation",
    "max_score": 100,
    "scoring": {
        "normal": "Normal (0-25): Minimal nasal obstruction",
        "mild": "Mild (26-50): Mild nasal obstruction affecting daily activities",
        "moderate": "Moderate (51-75): Moderate nasal obstruction requiring intervention",
        "severe": "Severe (76-100): Severe nasal obstruction requiring immediate medical attention",
    },
    "questions": [
        {
            "id": "1",
            "text": "Rate your nasal blockage or obstruction",
            "options": nose_options("Blockage or Obstruction"),
        },
        {
            "id": "2",
            "text": "Trouble breathing through your nose?",
            "options": nose_options("Trouble Breathing"),
        },
        {
            "id": "3",
            "text": "Trouble sleeping?",
            "options": nose_options("Problem Sleeping"),
        },
        {
            "id": "4",
            "text": "Rate your ability to get enough air through your nose during exercise or exertion?",
            "options": nose_options("Problem Getting Enough Air"),
        },
        {
            "id": "5",
            "text": "Rate your nasal congestion or stuffiness",
            "options": nose_options("Congestion or Stuffiness"),
        },
    ],
}

HHIA = {
    "id": "HHIA",
    "title": "Hearing Handicap Inventory for Adults",
    "description": "Assessment of hearing difficulties and their impact on daily life",
    "max_score": 100,
    "scoring": {
        "normal": "Normal (0-16): No hearing handicap",
        "mild": "Mild (17-42): Mild-to-moderate hearing handicap",
        "moderate": "Moderate (43-70): Moderate hearing handicap",
        "severe": "Severe (71-100): Significant hearing handicap requiring immediate attention",
    },
    "questions": _questions(
        [
            "Does a hearing problem cause you to feel embarrassed when meeting new people?",
            "Does a hearing problem cause you to feel frustrated when talking to members of your family?",
            "Do you have difficulty hearing when someone speaks in a whisper?",
            "Do you feel handicapped by a hearing problem?",
            "Does a hearing problem cause you difficulty when visiting friends, relatives, or neighbors?",
            "Does a hearing problem cause you to attend religious services less often than you would like?",
            "Does a hearing problem cause you to have arguments with family members?",
            "Does a hearing problem cause you difficulty when listening to TV or radio?",
            "Do you feel that any difficulty with your hearing limits or hampers your personal or social life?",
            "Does a hearing problem cause you difficulty when in a restaurant with relatives or friends?",
            "Does a hearing problem cause you to feel depressed?",
            "Does a hearing problem cause you to listen to TV or radio more loudly than others?",
            "Does a hearing problem cause you to feel nervous?",
            "Does a hearing problem cause you to visit friends, relatives, or neighbors less often than you would like?",
            "Does a hearing problem cause you to have difficulty hearing/understanding co-workers, clients, or customers?",
            "Do you feel handicapped by a hearing problem?",
            "Does a hearing problem cause you difficulty when listening to TV or radio?",
            "Does a hearing problem cause you to feel left out when you are with a group of people?",
            "Does a hearing problem cause you to be irritable?",
            "Does a hearing problem cause you to feel left out when you are with a group of people?",
            "Does a hearing problem cause you difficulty when you are in a crowded store?",
            "Does a hearing problem cause you to feel isolated from others?",
            "Does a hearing problem cause you to avoid groups of people?",
            "Does a hearing problem cause you difficulty when talking on the telephone?",
            "Do you feel that a hearing problem reduces your enjoyment of life?",
        ],
        HANDICAP_OPTIONS,
    ),
}

EPWORTH = {
    "id": "EPWORTH",
    "title": "Epworth Sleepiness Scale",
    "description": "Measure your general level of daytime sleepiness",
    "max_score": 24,
    "scoring": {
        "normal": "Normal (0-10): Normal daytime sleepiness",
        "mild": "Mild (11-12): Mild excessive daytime sleepiness",
        "moderate": "Moderate (13-15): Moderate excessive daytime sleepiness",
        "severe": "Severe (16-24): Severe excessive daytime sleepiness requiring medical attention",
    },
    "questions": _questions(
        [
            f"How likely are you to doze off or fall asleep {situation}?"
            for situation in [
                "while sitting and reading",
                "while watching TV",
                "while sitting inactive in a public place",
                "as a passenger in a car for an hour without a break",
                "while lying down to rest in the afternoon",
                "while sitting and talking to someone",
                "while sitting quietly after lunch without alcohol",
                "while in a car, while stopped for a few minutes in traffic",
            ]
        ],
        EPWORTH_OPTIONS,
    ),
}

SNOT12 = {
    "id": "SNOT12",
    "title": "SNOT12",
    "description": "Quick Sinus Evaluation",
    "max_score": 60,
    "scoring": {
        "normal": "Normal (0-12): Minimal symptoms with little impact",
        "mild": "Mild (13-25): Mild symptoms affecting quality of life",
        "moderate": "Moderate (26-40): Moderate symptoms requiring attention",
        "severe": "Severe (41-60): Severe symptoms requiring immediate medical attention",
    },
    "questions": _questions(
        [
            "Rate your Need to blow nose",
            "Rate your Runny nose",
            "Rate your Nasal blockage",
            "Rate the thickness of your nasal discharge",
            "Rate your Decreased sense of smell/taste",
            "Rate your Post-nasal drip",
            "Rate your Sneezing",
            "Rate your Cough",
            "Rate your Facial pressure/pain",
            "Rate your Ear fullness",
            "Rate your Difficulty falling asleep or staying asleep",
            "Rate your Reduced productivity or quality of life",
        ],
        SNOT12_OPTIONS,
    ),
}

DHI = {
    "id": "DHI",
    "title": "Dizziness Handicap Inventory",
    "description": "Assessment of dizziness impact on daily activities",
    "max_score": 100,
    "scoring": {
        "normal": "Normal (0-30): No dizziness handicap",
        "mild": "Mild (31-60): Mild dizziness handicap",
        "moderate": "Moderate (61-100): Moderate to severe dizziness handicap requiring medical attention",
        "severe": "Severe (>100): Severe dizziness handicap requiring immediate intervention",
    },
    "questions": _questions(
        [
            "Does looking up increase your problem?",
            "Because of your problem, do you feel frustrated?",
            "Because of your problem, do you restrict your travel for business or recreation?",
            "Does walking down the aisle of a supermarket increase your problems?",
            "Because of your problem, do you have difficulty getting into or out of bed?",
            "Does your problem significantly restrict your participation in social activities?",
            "Because of your problem, do you have difficulty reading?",
            "Does performing more ambitious activities like sports, dancing, household chores increase your problem?",
            "Because of your problem, are you afraid to leave your home without having someone accompany you?",
            "Because of your problem, have you been embarrassed in front of others?",
            "Do quick movements of your head increase your problem?",
            "Because of your problem, do you avoid heights?",
            "Does turning over in bed increase your problem?",
            "Because of your problem, is it difficult for you to do strenuous housework or yard work?",
            "Because of your problem, are you afraid people may think you are intoxicated?",
            "Because of your problem, is it difficult for you to go for a walk by yourself?",
            "Does walking down a sidewalk increase your problem?",
            "Because of your problem, is it difficult for you to concentrate?",
            "Because of your problem, is it difficult for you to walk around your house in the dark?",
            "Because of your problem, are you afraid to stay home alone?",
            "Because of your problem, do you feel handicapped?",
            "Has the problem placed stress on your relationships with members of your family or friends?",
            "Because of your problem, are you depressed?",
            "Does your problem interfere with your job or household responsibilities?",
            "Does bending over increase your problem?",
        ],
        HANDICAP_OPTIONS,
    ),
}

STOP = {
    "id": "STOP",
    "title": "STOP-Bang Sleep Apnea Screening",
    "description": "Screening tool for obstructive sleep apnea risk assessment",
    "max_score": 8,
    "scoring": {
        "low risk": "Low Risk (0-2): Low risk for obstructive sleep apnea",
        "intermediate risk": "Intermediate Risk (3-4): Intermediate risk for obstructive sleep apnea",
        "high risk": "High Risk (5-6): High risk for moderate to severe obstructive sleep apnea",
        "very high risk": "Very High Risk (7-8): Very high risk for severe obstructive sleep apnea",
    },
    "questions": _questions(
        [
            "Do you Snore loudly (louder than talking or loud enough to be heard through closed doors)?",
            "Do you often feel Tired, fatigued, or sleepy during daytime?",
            "Has anyone Observed you stop breathing during your sleep?",
            "Do you have or are you being treated for high blood Pressure?",
            "Body Mass Index more than 35 kg/m²?",
            "Age over 50 years old?",
            "Neck circumference greater than 40cm?",
            "Gender: Are you male?",
        ],
        STOP_OPTIONS,
    ),
}

TNSS = {
    "id": "TNSS",
    "title": "TNSS",
    "description": "Assessment of nasal congestion and rhinitis symptoms",
    "max_score": 12,
    "scoring": {
        "normal": "Normal (0-3): Minimal nasal symptoms",
        "mild": "Mild (4-6): Mild nasal symptoms",
        "moderate": "Moderate (7-9): Moderate nasal symptoms",
        "severe": "Severe (10-12): Severe nasal symptoms requiring medical attention",
    },
    "questions": _questions(
        [
            "Rate your runny nose",
            "Rate your sneezing",
            "Rate your nasal congestion",
            "Rate your nasal itching",
        ],
        TNSS_OPTIONS,
    ),
}

MIDAS = {
    "id": "MIDAS",
    "title": "Migraine Impact Assessment",
    "description": "Evaluate how migraines affect your daily life and well-being",
    "max_score": 28,
    "scoring": {
        "normal": "Minimal Impact (0-5): Your migraines have minimal impact on your daily life",
        "mild": "Mild Impact (6-12): Your migraines have a mild impact on your daily activities and quality of life",
        "moderate": "Moderate Impact (13-19): Your migraines have a moderate impact on your daily functioning and well-being",
        "severe": "Severe Impact (20-28): Your migraines have a severe impact on your quality of life and daily functioning",
    },
    "questions": _questions(
        [
            f"In the past 4 weeks, how often have migraines {item}?"
            for item in [
                "interfered with how well you dealt with family, friends and others who are close to you",
                "interfered with your leisure time activities, such as reading or exercising",
                "made it difficult to perform your work or daily activities",
                "kept you from getting as much done at work or at home",
                "limited your ability to concentrate on work or daily activities",
                "left you too tired to do work or daily activities",
                "limited the number of days you have felt energetic",
            ]
        ],
        MIDAS_OPTIONS,
    ),
}

SLEEP_CHECK = {
    "id": "SLEEP_CHECK",
    "title": "Sleep Symptoms Self-Check",
    "description": "See how disrupted your sleep might be in under 2 minutes",
    "max_score": 24,
    "scoring": {
        "normal": "Low Symptom Impact (0-5): Your symptoms suggest minimal sleep-related concerns at this time",
        "mild": "Mild Symptom Impact (6-11): Your symptoms suggest some mild sleep-related concerns",
        "moderate": "Moderate Symptom Impact (12-17): Your symptoms suggest moderate sleep-related concerns that could benefit from medical evaluation",
        "severe": "High Symptom Impact (18-24): Your symptoms suggest significant sleep-related issues; a comprehensive sleep evaluation is strongly recommended",
    },
    "questions": _questions(
        [
            f"Over the past 2 weeks, how often have you {item}?"
            for item in [
                "been told you snore loudly",
                "woken up gasping or choking",
                "woken up feeling unrefreshed",
                "felt sleepy during the day",
                "woken up with a headache",
                "had trouble concentrating during the day",
                "woken up during the night to use the bathroom",
                "woken up with a dry mouth or sore throat",
            ]
        ],
        SLEEP_CHECK_OPTIONS,
    ),
}

STANDARD_QUIZZES = [SNOT22, NOSE, HHIA, EPWORTH, SNOT12, DHI, STOP, TNSS, MIDAS, SLEEP_CHECK]


NOSE_SNOT = QuizDefinition.triage(
    id="NOSE_SNOT",
    title="NOSE-SNOT Assessment",
    description="Personalized nasal and sinus symptom evaluation",
    prompt=(
        "Is your breathing difficulty mainly due to nasal blockage or stuffiness, "
        "or do you also have other symptoms like facial pressure, headaches, "
        "postnasal drip, or a reduced sense of smell?"
    ),
    branches=[
        TriageBranch("Nasal blockage/stuffiness", "NOSE"),
        TriageBranch(
            "Sinus-related symptoms like facial pressure, headaches, or a reduced sense of smell",
            "SNOT12",
        ),
    ],
)


def builtin_definitions() -> list[QuizDefinition]:
    """Fresh copies of every built-in definition."""
    definitions = [QuizDefinition.from_dict(data) for data in STANDARD_QUIZZES]
    definitions.append(QuizDefinition.from_dict(NOSE_SNOT.to_dict()))
    return definitions
