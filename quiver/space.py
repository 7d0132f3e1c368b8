"""
Name-spaces: flat, and averse to duplicate keys.
Whoever catches AlreadyExists decides what sort of complaint that is.
"""
from typing import Generic, Iterable, Optional, TypeVar

T = TypeVar('T')

class AlreadyExists(KeyError): pass

class Layer(Generic[T]):
	""" Lightly enhanced dictionary: It does not like duplicate keys. """
	_symbol: dict[str, T]

	def __init__(self):
		self._symbol = {}

	def __contains__(self, key: str) -> bool:
		return key in self._symbol

	def symbol(self, key: str) -> Optional[T]:
		return self._symbol.get(key)

	def __getitem__(self, key: str) -> T:
		return self._symbol[key]

	def mount(self, key:str, symbol:T) -> T:
		if key in self._symbol:
			raise AlreadyExists(key)
		else:
			self._symbol[key] = symbol
			return symbol

	def each_symbol(self) -> Iterable[T]:
		return self._symbol.values()

	def atop(self, other:"Layer[T]") -> "Chain[T]":
		return Chain(self, other)

class Chain(Generic[T]):
	""" Look in the top layer first, then the rest. New definitions go on top. """
	def __init__(self, top:Layer[T], rest):
		self.top = top
		self._rest = rest

	def __contains__(self, key: str) -> bool:
		return key in self.top or key in self._rest

	def symbol(self, key: str) -> Optional[T]:
		found = self.top.symbol(key)
		return self._rest.symbol(key) if found is None else found

	def mount(self, key:str, symbol:T) -> T:
		if key in self._rest: raise AlreadyExists(key)
		return self.top.mount(key, symbol)
