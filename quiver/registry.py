"""
Holds the algebraic datatypes of one program.
Filled during the load phase, then frozen; afterward it is only read,
so any number of evaluations may share it.
"""
from typing import NamedTuple
from .ontology import Tagged, VALUE
from .syntax import DataType, Constructor
from .space import Layer
from .primitive import opaque_types
from .diagnostics import (
	DuplicateTypeError, DuplicateConstructorError, UnknownConstructorError,
	ArityMismatchError, RegistryFrozenError,
)

class ConstructorInfo(NamedTuple):
	datatype: DataType
	constructor: Constructor
	@property
	def arity(self): return self.constructor.arity()

class DataTypeRegistry:
	def __init__(self):
		self._types: Layer[DataType] = Layer()
		self._constructors: Layer[ConstructorInfo] = Layer()
		self._frozen = False

	def register(self, datatype:DataType) -> DataType:
		"""
		All-or-nothing: if any constructor name collides,
		neither the type nor any of its constructors get registered.
		"""
		if self._frozen:
			raise RegistryFrozenError("Cannot register type '%s' after loading is finished." % datatype.name)
		if datatype.name in self._types:
			raise DuplicateTypeError("Type '%s' is defined more than once." % datatype.name)
		clashes = self.clashes(datatype)
		if clashes: raise clashes[0][1]
		self._types.mount(datatype.name, datatype)
		for c in datatype.constructors:
			self._constructors.mount(c.name, ConstructorInfo(datatype, c))
		return datatype

	def clashes(self, datatype:DataType) -> list[tuple[int, DuplicateConstructorError]]:
		""" The position of each constructor of the type whose name is already taken, with the complaint about it. """
		found, seen = [], set()
		for index, c in enumerate(datatype.constructors):
			if c.name in seen or c.name in self._constructors:
				owner = datatype if c.name in seen else self._constructors[c.name].datatype
				pattern = "Constructor '%s' of type '%s' is already a constructor of type '%s'."
				found.append((index, DuplicateConstructorError(pattern % (c.name, datatype.name, owner.name))))
			seen.add(c.name)
		return found

	def freeze(self) -> "DataTypeRegistry":
		self._frozen = True
		return self

	@property
	def frozen(self): return self._frozen

	def knows_type(self, name:str) -> bool:
		return name in self._types or name in opaque_types

	def each_type(self):
		return self._types.each_symbol()

	def has_constructor(self, name:str) -> bool:
		return name in self._constructors

	def lookup_constructor(self, name:str) -> tuple[DataType, int]:
		""" The owning datatype and the declared field arity """
		info = self._constructors.symbol(name)
		if info is None:
			raise UnknownConstructorError("There is no constructor called '%s'." % name)
		return info.datatype, info.arity

	def construct(self, name:str, *fields:VALUE) -> Tagged:
		_, arity = self.lookup_constructor(name)
		if arity != len(fields):
			raise ArityMismatchError("Constructor '%s' takes %d field(s), but got %d." % (name, arity, len(fields)))
		return Tagged(name, fields)

def build_registry(types, report) -> DataTypeRegistry:
	"""
	Register every type, noting (rather than raising) the duplicates,
	so that the validator can carry on and find the rest of the trouble.
	"""
	registry = DataTypeRegistry()
	for dt in types:
		try: registry.register(dt)
		except DuplicateTypeError as ex: report.issue(ex)
		except DuplicateConstructorError:
			# Keep the constructors that do not clash, so patterns on them still resolve.
			clashes = registry.clashes(dt)
			for _, ex in clashes: report.issue(ex)
			dropped = {index for index, _ in clashes}
			kept = tuple(c for index, c in enumerate(dt.constructors) if index not in dropped)
			registry.register(DataType(dt.name, kept))
	return registry
