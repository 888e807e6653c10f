"""Map classification properties to the edge proxy's device taxonomy.

The mapping is an ordered chain of rules. Each rule may only refine the label
produced so far when that label is listed in its ``applies_to`` set, which is
how "within the mobile branch" and "only if still mobile" are expressed:

1. everything starts as ``desktop``
2. ``mobileDevice`` makes it ``mobile`` (assume a feature phone)
3. ``touchScreen`` upgrades a mobile device to ``touch``
4. ``isTablet`` upgrades a mobile or touch device to ``tablet``
5. if still ``mobile``, patch gaps in the service's flags:
   robots get the touch site, ``Tablet`` in the header means a tablet, and
   Windows Phone 7 and later always ship capacitive touch screens.

Once a heuristic in step 5 fires the label is no longer ``mobile``, so later
heuristics cannot override it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .types import DeviceProperties, DeviceType

type RulePredicate = Callable[[DeviceProperties, str], bool]

_MOBILE_BRANCH = frozenset({DeviceType.MOBILE, DeviceType.TOUCH})
_STILL_MOBILE = frozenset({DeviceType.MOBILE})

WINDOWS_PHONE_MARKERS = ("Windows Phone 7", "Windows Phone 8", "Windows Phone 9")


@dataclass(frozen=True, slots=True)
class DeviceTypeRule:
    name: str
    applies_to: frozenset[DeviceType]
    predicate: RulePredicate
    result: DeviceType

    def refine(
        self,
        current: DeviceType,
        properties: DeviceProperties,
        identifier: str,
    ) -> DeviceType:
        if current in self.applies_to and self.predicate(properties, identifier):
            return self.result
        return current


DEFAULT_RULES: tuple[DeviceTypeRule, ...] = (
    DeviceTypeRule(
        name="mobile-device",
        applies_to=frozenset({DeviceType.DESKTOP}),
        predicate=lambda props, _ua: props.mobile_device,
        result=DeviceType.MOBILE,
    ),
    DeviceTypeRule(
        name="touch-screen",
        applies_to=_STILL_MOBILE,
        predicate=lambda props, _ua: props.touch_screen,
        result=DeviceType.TOUCH,
    ),
    DeviceTypeRule(
        name="tablet-flag",
        applies_to=_MOBILE_BRANCH,
        predicate=lambda props, _ua: props.is_tablet,
        result=DeviceType.TABLET,
    ),
    DeviceTypeRule(
        name="robot",
        applies_to=_STILL_MOBILE,
        predicate=lambda props, _ua: props.is_robot,
        result=DeviceType.TOUCH,
    ),
    # e.g. "Opera/9.80 (Android 4.2.1; Linux; Opera Tablet/ADR-1301080958) Presto/2.11.355"
    DeviceTypeRule(
        name="tablet-in-user-agent",
        applies_to=_STILL_MOBILE,
        predicate=lambda _props, ua: "Tablet" in ua,
        result=DeviceType.TABLET,
    ),
    DeviceTypeRule(
        name="windows-phone",
        applies_to=_STILL_MOBILE,
        predicate=lambda _props, ua: any(marker in ua for marker in WINDOWS_PHONE_MARKERS),
        result=DeviceType.TOUCH,
    ),
)


def classify_device_type(
    properties: DeviceProperties,
    identifier: str,
    *,
    rules: tuple[DeviceTypeRule, ...] = DEFAULT_RULES,
    default: DeviceType = DeviceType.DESKTOP,
) -> DeviceType:
    """Run ``rules`` in order over ``properties`` and return the final label."""

    device_type = default
    for rule in rules:
        device_type = rule.refine(device_type, properties, identifier)
    return device_type


__all__ = ["DEFAULT_RULES", "DeviceTypeRule", "RulePredicate", "classify_device_type"]
