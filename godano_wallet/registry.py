"""Command taxonomy derived from the client operation inventory.

Operation names follow a ``<Verb><Object>`` convention (``GetWallet``,
``ListStakePools``). :class:`MethodRegistry` splits every name into a verb and
an object, folds plural and Byron-era spellings of the same resource into one
command group and records how each operation takes its arguments. The CLI
builds its sub-commands from :meth:`MethodRegistry.groups` and dispatches
through :meth:`MethodDescriptor.invoke`.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from requests import PreparedRequest, Response

from .flags import is_params_struct
from .log import TRACE
from .operations import ARGUMENT_NAMES, METHOD_HAS_BODY, OPERATIONS, Operation
from .params import RawBody, make_argument

logger = logging.getLogger(__name__)

BYRON = "Byron"

# Irregular operation names, mapped to the name they would have if the API
# were consistent. Applied before anything else is derived from the name.
NAME_REMAPPINGS: Dict[str, str] = {
    "GetShelleyWalletMigrationInfo": "GetWalletMigrationInfo",
    "MigrateShelleyWallet": "MigrateWallet",
    "ByronSelectCoins": "SelectByronCoins",
    "ImportAddresses": "ImportAddressBatch",
}

# Plural object spellings. Only these are folded; there is no stemming.
OBJECT_REMAPPINGS: Dict[str, str] = {
    "Wallets": "Wallet",
    "Addresses": "Address",
    "Transactions": "Transaction",
    "Assets": "Asset",
    "StakePools": "StakePool",
    "MaintenanceActions": "MaintenanceAction",
}

_NAME_SPLIT = re.compile(r"^([A-Z][a-z]+)([A-Za-z]+)$")
_LEADING_WORD = re.compile(r"^[A-Z][^A-Z]+")

PARAMS = "params"
BODY = "body"

DryRunCallback = Callable[[PreparedRequest], None]


class DryRunInterrupt(Exception):
    """Stops a request after it was prepared and shown, before it is sent."""


@dataclass(frozen=True)
class ExtraArgument:
    """The trailing non-string argument of an operation."""

    name: str
    kind: str
    type: Any

    @property
    def is_params(self) -> bool:
        return self.kind == PARAMS

    @property
    def is_body(self) -> bool:
        return self.kind == BODY


@dataclass(frozen=True)
class MethodDescriptor:
    """One operation exposed as a command."""

    operation: Operation
    name: str
    verb: str
    object: str
    string_args: Tuple[str, ...] = ()
    extra: Optional[ExtraArgument] = None
    is_byron: bool = False
    byron_variant: Optional["MethodDescriptor"] = None

    @property
    def raw_name(self) -> str:
        return self.operation.name

    def make_extra(self) -> Any:
        """Return an empty value for the extra argument, or ``None`` if there is none."""

        if self.extra is None:
            return None
        value = make_argument(self.raw_name)
        if value is None:
            value = self.extra.type() if self.extra.is_params else {}
        return value

    def invoke(
        self,
        client: Any,
        ctx: Any,
        args: Sequence[str],
        extra: Any = None,
        *,
        byron: bool = False,
        dry_run: bool = False,
        on_dry_run: Optional[DryRunCallback] = None,
    ) -> Optional[Response]:
        """Call the operation on ``client``.

        With ``byron`` the merged Byron variant is called instead. With
        ``dry_run`` the prepared request is handed to ``on_dry_run`` and never
        sent; the return value is then ``None``.
        """

        target = self
        if byron:
            if self.byron_variant is None:
                raise ValueError(f"{self.name} has no Byron variant")
            target = self.byron_variant
            extra = _convert_extra(extra, target)

        if len(args) != len(target.string_args):
            raise TypeError(
                f"{target.name} expects {len(target.string_args)} argument(s) "
                f"({', '.join(target.string_args)}), got {len(args)}"
            )
        call_args: List[Any] = list(args)
        if target.extra is not None:
            call_args.append(extra if extra is not None else target.make_extra())

        editors = [_dry_run_editor(on_dry_run)] if dry_run else []
        logger.debug("Calling %s", target.raw_name)
        logger.log(TRACE, "Arguments of %s: %r", target.raw_name, call_args)
        method = getattr(client, target.operation.python_name)
        try:
            return method(ctx, *call_args, *editors)
        except DryRunInterrupt:
            return None


@dataclass(frozen=True)
class CommandGroup:
    """All commands sharing an object, sorted by verb."""

    object: str
    is_byron: bool
    verbs: Tuple[MethodDescriptor, ...]

    @property
    def single(self) -> bool:
        return len(self.verbs) == 1


def _dry_run_editor(callback: Optional[DryRunCallback]) -> Callable[[Any, PreparedRequest], None]:
    def editor(ctx: Any, request: PreparedRequest) -> None:
        if callback is not None:
            callback(request)
        raise DryRunInterrupt()

    return editor


def _convert_extra(extra: Any, variant: MethodDescriptor) -> Any:
    # Params of the two eras differ by type but share field names.
    target = variant.extra
    if extra is None or target is None or not target.is_params:
        return extra
    if isinstance(extra, target.type) or not dataclasses.is_dataclass(extra):
        return extra
    target_names = {field.name for field in dataclasses.fields(target.type)}
    values = {}
    for field in dataclasses.fields(extra):
        value = getattr(extra, field.name)
        if field.name in target_names:
            values[field.name] = value
        elif value is not None:
            logger.warning("Ignoring %s=%r: not supported by %s", field.name, value, variant.raw_name)
    return target.type(**values)


def byron_sibling_name(name: str) -> Optional[str]:
    """Insert ``Byron`` after the leading word: ``SelectCoins`` -> ``SelectByronCoins``."""

    match = _LEADING_WORD.match(name)
    if match is None:
        return None
    return name[: match.end()] + BYRON + name[match.end():]


class MethodRegistry:
    """Commands discovered from an operation inventory.

    Discovery is deterministic: the same inventory and tables always produce
    the same descriptors in the same order. Operations that do not fit the
    naming or argument conventions are left out and logged at DEBUG level.
    """

    def __init__(
        self,
        operations: Sequence[Operation] = OPERATIONS,
        *,
        argument_names: Mapping[str, Sequence[str]] = ARGUMENT_NAMES,
        has_body: Mapping[str, bool] = METHOD_HAS_BODY,
        name_remappings: Mapping[str, str] = NAME_REMAPPINGS,
        object_remappings: Mapping[str, str] = OBJECT_REMAPPINGS,
    ) -> None:
        self._argument_names = argument_names
        self._has_body = has_body
        self._name_remappings = name_remappings
        self._object_remappings = object_remappings

        discovered: List[MethodDescriptor] = []
        seen: Dict[Tuple[bool, str, str], MethodDescriptor] = {}
        for op in operations:
            descriptor = self._discover(op)
            if descriptor is None:
                continue
            key = (descriptor.is_byron, descriptor.object, descriptor.verb)
            if key in seen:
                logger.debug(
                    "Skipping %s: command %s %s is already provided by %s",
                    op.name,
                    descriptor.object,
                    descriptor.verb,
                    seen[key].raw_name,
                )
                continue
            seen[key] = descriptor
            discovered.append(descriptor)

        self._descriptors = self._merge_byron(discovered)
        self._by_name: Dict[str, MethodDescriptor] = {}
        for descriptor in self._descriptors:
            self._index(descriptor)

    def _index(self, descriptor: MethodDescriptor) -> None:
        self._by_name[descriptor.name] = descriptor
        self._by_name[descriptor.raw_name] = descriptor
        if descriptor.byron_variant is not None:
            self._index(descriptor.byron_variant)

    # Discovery -----------------------------------------------------------

    def _discover(self, op: Operation) -> Optional[MethodDescriptor]:
        name = self._name_remappings.get(op.name, op.name)
        match = _NAME_SPLIT.match(name)
        if match is None:
            logger.debug("Skipping %s: name is not <Verb><Object>", op.name)
            return None
        verb, obj = match.group(1).lower(), match.group(2)

        if op.extra_type is RawBody:
            return None

        is_byron = BYRON in obj
        if is_byron:
            obj = obj.replace(BYRON, "")
        obj = self._object_remappings.get(obj, obj)
        if not obj:
            logger.debug("Skipping %s: no object left after removing %s", op.name, BYRON)
            return None

        if not op.variadic:
            logger.debug("Skipping %s: no request editor slot", op.name)
            return None
        non_strings = [index for index, kind in enumerate(op.parameters) if kind is not str]
        if len(non_strings) > 1 or (non_strings and non_strings[0] != len(op.parameters) - 1):
            logger.debug("Skipping %s: only the last argument may be a non-string", op.name)
            return None
        names = self._argument_names.get(op.name)
        if names is None:
            logger.debug("Skipping %s: argument names are unknown", op.name)
            return None
        if len(names) != len(op.parameters):
            logger.debug(
                "Skipping %s: %d argument names for %d arguments", op.name, len(names), len(op.parameters)
            )
            return None

        extra: Optional[ExtraArgument] = None
        num_strings = len(op.parameters)
        if non_strings:
            num_strings -= 1
            extra_type = op.parameters[-1]
            if is_params_struct(extra_type):
                extra = ExtraArgument(name=names[-1], kind=PARAMS, type=extra_type)
            elif self._has_body.get(op.name):
                extra = ExtraArgument(name=names[-1], kind=BODY, type=extra_type)
            else:
                logger.debug("Skipping %s: unsupported argument type %r", op.name, extra_type)
                return None

        return MethodDescriptor(
            operation=op,
            name=name,
            verb=verb,
            object=obj,
            string_args=tuple(names[:num_strings]),
            extra=extra,
            is_byron=is_byron,
        )

    def _merge_byron(self, discovered: List[MethodDescriptor]) -> List[MethodDescriptor]:
        byron_by_name = {d.name: d for d in discovered if d.is_byron}
        merged: Dict[str, MethodDescriptor] = {}
        result: List[MethodDescriptor] = []
        for descriptor in discovered:
            if descriptor.is_byron:
                continue
            sibling_name = byron_sibling_name(descriptor.name)
            sibling = byron_by_name.get(sibling_name) if sibling_name else None
            if sibling is not None and _compatible(descriptor, sibling):
                logger.debug("Merging %s into %s as --byron", sibling.raw_name, descriptor.raw_name)
                merged[sibling.name] = sibling
                descriptor = dataclasses.replace(descriptor, byron_variant=sibling)
            elif sibling is not None:
                logger.debug(
                    "Not merging %s into %s: arguments differ", sibling.raw_name, descriptor.raw_name
                )
            result.append(descriptor)
        result.extend(d for d in discovered if d.is_byron and d.name not in merged)
        return result

    # Lookup --------------------------------------------------------------

    @property
    def descriptors(self) -> List[MethodDescriptor]:
        """Standalone commands; merged Byron variants are reachable via ``byron_variant``."""

        return list(self._descriptors)

    def __iter__(self) -> Iterator[MethodDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> Optional[MethodDescriptor]:
        """Look up a descriptor by display or raw operation name."""

        return self._by_name.get(name)

    def find(self, obj: str, verb: str, *, byron: bool = False) -> Optional[MethodDescriptor]:
        for descriptor in self._descriptors:
            if descriptor.object == obj and descriptor.verb == verb and descriptor.is_byron == byron:
                return descriptor
        return None

    def groups(self) -> List[CommandGroup]:
        grouped: Dict[Tuple[bool, str], List[MethodDescriptor]] = {}
        for descriptor in self._descriptors:
            grouped.setdefault((descriptor.is_byron, descriptor.object), []).append(descriptor)
        return [
            CommandGroup(object=obj, is_byron=is_byron, verbs=tuple(sorted(items, key=lambda d: d.verb)))
            for (is_byron, obj), items in sorted(grouped.items())
        ]


def _compatible(primary: MethodDescriptor, variant: MethodDescriptor) -> bool:
    if primary.string_args != variant.string_args:
        return False
    primary_kind = primary.extra.kind if primary.extra else None
    variant_kind = variant.extra.kind if variant.extra else None
    return primary_kind == variant_kind
