"""
Turns a vision response into a flower report: which flowers, how many of
each, the best confidence seen, plus dominant colors and the caption.
"""

from dataclasses import dataclass

from vision_client import VisionResult

FLOWER_TERMS = ('flower', 'rose', 'tulip', 'daisy', 'lily', 'orchid',
                'sunflower', 'iris', 'peony', 'bouquet')
OBJECT_TERMS = ('flower', 'bouquet')


@dataclass(frozen=True)
class TagHit:
    type: str
    confidence: float


@dataclass(frozen=True)
class FlowerEntry:
    type: str
    count: int
    confidence: float


@dataclass(frozen=True)
class FlowerAnalysis:
    flowers: tuple = ()
    colors: tuple = ()
    description: str = ''

    def to_dict(self):
        return {
            'flowers': [
                {'type': f.type, 'count': f.count, 'confidence': f.confidence}
                for f in self.flowers
            ],
            'colors': list(self.colors),
            'description': self.description,
        }


def _confidence(item):
    try:
        return float(item.get('confidence') or 0.0)
    except (TypeError, ValueError):
        return 0.0


def _hits(items, name_key, terms):
    for item in items:
        if not isinstance(item, dict):
            continue
        name = item.get(name_key)
        if not isinstance(name, str):
            continue
        if any(term in name.lower() for term in terms):
            yield TagHit(type=name, confidence=_confidence(item))


def collect_hits(result):
    hits = list(_hits(result.tags, 'name', FLOWER_TERMS))
    hits.extend(_hits(result.objects, 'object', OBJECT_TERMS))
    return hits


def merge_hits(hits):
    """Group by lowercase type: count the hits, keep the highest confidence"""
    groups = {}
    for hit in hits:
        key = hit.type.lower()
        count, best = groups.get(key, (0, 0.0))
        groups[key] = (count + 1, max(best, hit.confidence))
    return tuple(FlowerEntry(type=key, count=count, confidence=best)
                 for key, (count, best) in groups.items())


def aggregate(vision_result):
    """
    Build a FlowerAnalysis from a VisionResult or a plain response dict.

    Pure: no I/O, never raises. No matches gives an empty flower list.
    """
    if not isinstance(vision_result, VisionResult):
        vision_result = VisionResult(vision_result)

    colors = tuple(c for c in vision_result.dominant_colors if isinstance(c, str))
    captions = vision_result.captions
    description = ''
    if captions and isinstance(captions[0], dict):
        description = captions[0].get('text') or ''

    return FlowerAnalysis(
        flowers=merge_hits(collect_hits(vision_result)),
        colors=colors,
        description=description,
    )
