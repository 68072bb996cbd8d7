"""
CTC Greedy Decoding

Collapse rule: take the best class at every position, merge consecutive
repeats, then drop the blank symbol.
"""

from typing import Sequence, Tuple

import numpy as np


def softmax(logits: np.ndarray) -> np.ndarray:
    shifted = logits - logits.max(axis=-1, keepdims=True)
    exp = np.exp(shifted)
    return exp / exp.sum(axis=-1, keepdims=True)


def ctc_greedy_decode(probs: np.ndarray, vocabulary: Sequence[str], blank: int = 0) -> Tuple[str, float]:
    """
    Decode one sequence of per-position class probabilities.

    Args:
        probs: (T, num_classes) probabilities
        vocabulary: Class index to character; vocabulary[blank] is ignored
        blank: Index of the blank/collapse symbol

    Returns:
        (text, confidence). Confidence is the product over emitted characters
        of the highest probability within each character's run. An empty
        decode reports the lowest blank probability instead.
    """
    best = probs.argmax(axis=-1)
    best_prob = probs.max(axis=-1)

    chars = []
    confidence = 1.0
    run_prob = 0.0
    previous = blank
    for index, prob in zip(best.tolist(), best_prob.tolist()):
        if index != previous:
            if previous != blank:
                confidence *= run_prob
            run_prob = 0.0
            if index != blank:
                chars.append(vocabulary[index])
        if index != blank:
            run_prob = max(run_prob, prob)
        previous = index
    if previous != blank:
        confidence *= run_prob

    if not chars:
        blank_probs = probs[:, blank]
        return "", float(blank_probs.min()) if blank_probs.size else 0.0
    return "".join(chars), float(confidence)
