"""Sample learner profiles for local runs and the demo frontend."""
from typing import List, Optional

from playgen.generation.models import LearnerProfile, PerformanceRecord

LEARNER_PROFILES: List[LearnerProfile] = [
    LearnerProfile(
        name="Sarah",
        subject="Python Programming",
        level="beginner",
        context=(
            "Career switcher from marketing (3 years in digital marketing). Started learning Python "
            "6 weeks ago through an online bootcamp. Highly motivated but sometimes frustrated by "
            "abstract concepts. Learns best with concrete, relatable examples."
        ),
        known_strengths=[
            "Variables and assignment",
            "Basic if/else branching",
            "Simple for loops with range()",
            "String concatenation and f-strings",
            "Using print() for debugging",
        ],
        known_gaps=[
            "Functions: when to use parameters vs return values",
            "Mutable vs immutable types",
            "List methods (.append vs .extend vs +)",
            "Dictionary iteration patterns",
            "Scope rules (local vs global)",
            "Basic OOP concepts",
        ],
        misconceptions=[
            "Thinks assignment always copies data (doesn't understand references)",
            "Believes functions must always return something explicitly",
            "Confuses parameters and arguments",
            "Thinks .sort() returns a new sorted list",
        ],
        preferred_modalities=["hands-on", "visual"],
        response_to_challenge=(
            'Gets frustrated briefly, then asks "can you show me an example?" '
            "Recovers quickly with concrete demonstrations."
        ),
        engagement_triggers=[
            "Real-world analogies (marketing data, spreadsheets)",
            "Seeing her code actually do something visual",
            "Small wins and streaks",
        ],
        recent_performance=[
            PerformanceRecord(game="Sort Battle", score=14, max_score=18,
                              notable_errors=['Put "set" in Immutable', "Confused SyntaxError with RuntimeError"]),
            PerformanceRecord(game="Prediction Bet", score=2, max_score=4,
                              notable_errors=["Didn't predict reference aliasing", "Thought strings were mutable"]),
            PerformanceRecord(game="Error Detective", score=8, max_score=10,
                              notable_errors=["Missed that .sort() returns None"]),
        ],
        current_module="Functions and Scope",
        modules_completed=["Variables & Types", "Control Flow", "Loops", "Strings"],
        upcoming_topics=["Data Structures Deep Dive", "File I/O", "Error Handling", "Classes & Objects"],
    ),
    LearnerProfile(
        name="Marcus",
        subject="World War 2 History",
        level="intermediate",
        context=(
            "History enthusiast in his 40s. Avid reader and documentary watcher. Has solid knowledge of "
            'the "greatest hits" events but wants to understand the strategic, economic, and political '
            'dimensions that shaped outcomes. Particularly interested in counterfactual analysis ("what if" scenarios).'
        ),
        known_strengths=[
            "Major timeline events (1939-1945)",
            "Key leaders and their roles",
            "European theater broad strokes",
            "Pacific theater major battles",
            "Holocaust awareness",
        ],
        known_gaps=[
            "Strategic decision-making rationale behind key operations",
            "Eastern Front beyond Stalingrad",
            "The role of logistics and industrial capacity",
            "Intelligence warfare (Enigma, Ultra, Venona)",
            "Home front impacts and civilian experience",
            "Lesser-known theaters (North Africa, China-Burma-India)",
        ],
        misconceptions=[
            "Overestimates the role of individual battles vs logistics/attrition",
            "Thinks D-Day was primarily an American operation",
            "Assumes the atomic bombs were the sole reason Japan surrendered",
            "Underestimates Soviet contribution to Allied victory",
        ],
        preferred_modalities=["analytical", "conversational"],
        response_to_challenge=(
            "Loves being wrong when given a surprising fact. Will argue his position first, "
            "then gracefully update when shown evidence."
        ),
        engagement_triggers=[
            "Counterfactual scenarios (\"what if Hitler hadn't invaded Russia?\")",
            "Surprising statistics or lesser-known facts",
            'Strategic analysis and "fog of war" decisions',
        ],
        recent_performance=[
            PerformanceRecord(game="Timeline", score=5, max_score=6,
                              notable_errors=["Placed Munich Agreement after Anschluss (both 1938, got order wrong)"]),
            PerformanceRecord(game="Flow Diagram", score=3, max_score=4,
                              notable_errors=["Didn't know Hitler diverted to Kiev"]),
            PerformanceRecord(game="Claim-Evidence", score=2, max_score=3,
                              notable_errors=["Picked distractor about Russian winter instead of Stalingrad being the turning point"]),
        ],
        current_module="Strategic Decision-Making",
        modules_completed=["Timeline of the War", "Major Leaders", "European Theater", "Pacific Theater"],
        upcoming_topics=["Intelligence & Code-Breaking", "Economics of Total War", "Home Fronts",
                         "Legacy & Cold War Origins"],
    ),
    LearnerProfile(
        name="Priya",
        subject="Machine Learning",
        level="intermediate",
        context=(
            "Software engineer at a mid-size tech company (4 years experience). Strong in Python and "
            "statistics. Took an online ML course last year. Now trying to apply ML at work but keeps "
            "hitting walls on model selection and debugging. Very analytical and enjoys mathematical precision."
        ),
        known_strengths=[
            "Linear regression and logistic regression",
            "Train/test splitting and cross-validation",
            "Basic feature engineering",
            "Pandas and NumPy data manipulation",
            "Gradient descent (conceptual)",
            "Supervised vs unsupervised distinction",
        ],
        known_gaps=[
            "Neural network architecture design choices",
            "Backpropagation mechanics (can't trace it by hand)",
            "When to use which model (decision trees vs SVM vs neural nets)",
            "Regularization techniques (L1 vs L2, dropout)",
            "Handling imbalanced datasets",
            "Model interpretability and explainability",
        ],
        misconceptions=[
            "Thinks more features always help (doesn't grasp curse of dimensionality)",
            "Believes accuracy is the best metric for all problems",
            "Assumes neural nets are always better than simpler models",
            "Confused about what \"training\" actually optimizes (thinks it's accuracy, not loss)",
        ],
        preferred_modalities=["analytical", "hands-on"],
        response_to_challenge=(
            "Methodical. Pauses, thinks through the math, then gives a precise answer. "
            'If wrong, asks "where did my reasoning break down?"'
        ),
        engagement_triggers=[
            "Mathematical intuition behind algorithms",
            "Real-world case studies of ML failures",
            "Comparing approaches on the same problem",
        ],
        recent_performance=[
            PerformanceRecord(game="Sort Battle", score=15, max_score=18,
                              notable_errors=["Classified PCA as supervised",
                                              "Missed that sentiment analysis is classification"]),
            PerformanceRecord(game="Node Graph", score=4, max_score=5,
                              notable_errors=["Got backprop gradient sign wrong"]),
            PerformanceRecord(game="Prediction Bet", score=1, max_score=3,
                              notable_errors=["Predicted more features = better performance",
                                              "Didn't account for class imbalance"]),
        ],
        current_module="Model Selection & Evaluation",
        modules_completed=["ML Foundations", "Supervised Learning", "Data Preprocessing", "Feature Engineering"],
        upcoming_topics=["Neural Networks & Deep Learning", "Unsupervised Learning", "Ensemble Methods",
                         "ML in Production"],
    ),
    LearnerProfile(
        name="Alex",
        subject="Quantum Computing",
        level="beginner",
        context=(
            "Physics undergraduate in their third year. Strong classical mechanics and linear algebra "
            "background. Just started a quantum computing elective. Fascinated by the topic but struggling "
            "to bridge the gap between quantum mechanics theory and practical quantum algorithms."
        ),
        known_strengths=[
            "Linear algebra (eigenvalues, matrix multiplication, vector spaces)",
            "Classical computing basics (gates, circuits, binary)",
            "Quantum mechanics fundamentals (wave-particle duality, superposition concept)",
            "Dirac notation basics",
        ],
        known_gaps=[
            "Quantum gates (Hadamard, CNOT, T-gate) and their matrix representations",
            "Entanglement as a computational resource",
            "Quantum circuit construction",
            "Grover's and Shor's algorithms",
            "Quantum error correction",
            "Difference between quantum and classical complexity classes",
        ],
        misconceptions=[
            "Thinks quantum computers can try all solutions simultaneously (misunderstands parallelism)",
            "Believes measurement is deterministic after superposition",
            'Confuses qubits having "more states" with qubits being continuous-valued',
        ],
        preferred_modalities=["visual", "analytical"],
        response_to_challenge=(
            "Tries to map everything back to linear algebra concepts they know. "
            "Sometimes overfits classical intuitions onto quantum behavior."
        ),
        engagement_triggers=[
            "Circuit diagrams and visual gate representations",
            "Step-by-step mathematical traces",
            "Comparing quantum vs classical approaches to same problem",
        ],
        current_module="Quantum Gates & Circuits",
        modules_completed=["Classical Computing Review", "Qubits & Superposition"],
        upcoming_topics=["Entanglement", "Quantum Algorithms", "Quantum Error Correction", "Quantum Advantage"],
    ),
]


def list_profile_names() -> List[str]:
    return [p.name for p in LEARNER_PROFILES]


def get_profile(name: str) -> Optional[LearnerProfile]:
    """Case-insensitive lookup by learner name."""
    wanted = (name or "").strip().lower()
    for profile in LEARNER_PROFILES:
        if profile.name.lower() == wanted:
            return profile
    return None
