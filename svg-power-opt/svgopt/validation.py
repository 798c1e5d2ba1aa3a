import logging

from .engine import optimize

logger = logging.getLogger(__name__)


def validate_svg(svg: str) -> bool:
    """True if *svg* survives a parse/serialize round trip through the engine."""
    try:
        optimize(svg, [], multipass=False)
    except Exception as e:
        logger.debug("SVG validation failed: %s", e)
        return False
    return True


__all__ = ["validate_svg"]
