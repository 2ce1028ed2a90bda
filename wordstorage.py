# storage for the limbs of a BigInt.
#  short numbers live in a fixed inline array of INLINE_WORDS uint32s.
#  longer ones move to a SharedWords heap buffer which copies share by
#    counting owners, and which is detached before any write while shared.
#  a storage that has moved to the heap stays there even if it shrinks.

import enum

import numpy as np

INLINE_WORDS = 4
WORD_MAX = (1<<32) - 1

def ceil_exp_2(n):
    return 1 << (int(n) - 1).bit_length()

class SharedWords:
    '''Growable uint32 buffer with an owner count.'''
    def __init__(self, data, *, xp=None, capacity=None):
        if xp is None:
            xp = data.__array_namespace__()
        self.xp = xp
        self.size = data.shape[0]
        if capacity is None:
            capacity = ceil_exp_2(max(self.size, INLINE_WORDS + 1))
        self.capacity = capacity
        self.storage = xp.zeros(capacity, dtype=xp.uint32)
        self.storage[:self.size] = data
        self.refs = 1

    @property
    def data(self):
        return self.storage[:self.size]

    def _reserve(self, size):
        if size > self.capacity:
            capacity = ceil_exp_2(size)
            storage = self.xp.zeros(capacity, dtype=self.xp.uint32)
            storage[:self.size] = self.storage[:self.size]
            self.storage = storage
            self.capacity = capacity

    def append(self, word):
        self._reserve(self.size + 1)
        self.storage[self.size] = word
        self.size += 1

    def pop(self):
        self.size -= 1
        word = int(self.storage[self.size])
        self.storage[self.size] = 0
        return word

    def copy(self):
        return SharedWords(self.data, xp=self.xp, capacity=self.capacity)

    def free(self):
        self.storage = None
        self.size = 0
        self.capacity = 0
        self.refs = 0

    def __repr__(self):
        return f'SharedWords(refs={self.refs}, size={self.size}, capacity={self.capacity})'

class Repr(enum.Enum):
    INLINE = 'inline'
    HEAP = 'heap'

class WordStorage:
    def __init__(self, size=0, fill=0, *, xp=None):
        if xp is None:
            xp = np
        self.xp = xp
        self._tag = Repr.INLINE
        self._inline = None
        self._shared = None
        self._size = 0
        _check_word(fill)
        if size > INLINE_WORDS:
            data = xp.zeros(size, dtype=xp.uint32)
            data[:] = fill
            self._tag = Repr.HEAP
            self._shared = SharedWords(data, xp=xp)
        else:
            self._inline = xp.zeros(INLINE_WORDS, dtype=xp.uint32)
            self._inline[:size] = fill
        self._size = size

    @classmethod
    def from_words(cls, words, *, xp=None):
        storage = cls(xp=xp)
        for word in words:
            storage.append(word)
        return storage

    @property
    def is_inline(self):
        return self._tag is Repr.INLINE
    @property
    def is_shared(self):
        return self._tag is Repr.HEAP and self._shared.refs > 1
    @property
    def refs(self):
        if self._tag is Repr.HEAP:
            return self._shared.refs
        return 1

    def shares_buffer(self, other):
        return (self._tag is Repr.HEAP and other._tag is Repr.HEAP
                and self._shared is other._shared)

    # copy

    def _copy_from(self, other):
        xp = self.xp = other.xp
        if other._tag is Repr.INLINE:
            self._tag = Repr.INLINE
            self._inline = xp.asarray(other._inline, copy=True)
            self._shared = None
        elif other._tag is Repr.HEAP:
            if other._size <= INLINE_WORDS:
                # a shrunken heap source is materialized inline
                self._tag = Repr.INLINE
                self._inline = xp.zeros(INLINE_WORDS, dtype=xp.uint32)
                self._inline[:other._size] = other._shared.data
                self._shared = None
            else:
                self._tag = Repr.HEAP
                self._inline = None
                self._shared = other._shared
                self._shared.refs += 1
        else:
            raise AssertionError(other._tag)
        self._size = other._size

    def copy(self):
        storage = WordStorage.__new__(WordStorage)
        storage._tag = Repr.INLINE
        storage._shared = None
        storage._copy_from(self)
        return storage
    __copy__ = copy

    def release(self):
        if self._tag is Repr.HEAP and self._shared is not None:
            if self._shared.refs == 1:
                self._shared.free()
            else:
                self._shared.refs -= 1
            self._shared = None
        self._tag = Repr.INLINE
        self._inline = None
        self._size = 0

    def __del__(self):
        # attributes may be missing if __init__ raised
        if getattr(self, '_shared', None) is not None:
            self.release()

    def assign(self, other):
        if self is other:
            return self
        self.release()
        self._copy_from(other)
        return self

    # access

    def _detach(self):
        # copy before write while the heap buffer has other owners
        if self._shared.refs > 1:
            self._shared.refs -= 1
            self._shared = self._shared.copy()

    def _index(self, idx):
        if idx < 0:
            idx += self._size
        if not 0 <= idx < self._size:
            raise IndexError(idx)
        return idx

    def __len__(self):
        return self._size

    def __getitem__(self, idx):
        idx = self._index(idx)
        if self._tag is Repr.INLINE:
            return int(self._inline[idx])
        elif self._tag is Repr.HEAP:
            return int(self._shared.storage[idx])
        raise AssertionError(self._tag)

    def __setitem__(self, idx, word):
        idx = self._index(idx)
        _check_word(word)
        if self._tag is Repr.INLINE:
            self._inline[idx] = word
        elif self._tag is Repr.HEAP:
            self._detach()
            self._shared.storage[idx] = word
        else:
            raise AssertionError(self._tag)

    def __iter__(self):
        for idx in range(self._size):
            yield self[idx]

    def back(self):
        return self[self._size - 1]

    def append(self, word):
        _check_word(word)
        if self._tag is Repr.INLINE:
            if self._size < INLINE_WORDS:
                self._inline[self._size] = word
            else:
                self._shared = SharedWords(self._inline[:self._size], xp=self.xp)
                self._inline = None
                self._tag = Repr.HEAP
                self._shared.append(word)
        elif self._tag is Repr.HEAP:
            self._detach()
            self._shared.append(word)
        else:
            raise AssertionError(self._tag)
        self._size += 1

    def extend(self, count, word=0):
        for idx in range(count):
            self.append(word)

    def pop(self):
        if self._size == 0:
            raise IndexError('pop from empty WordStorage')
        if self._tag is Repr.INLINE:
            word = int(self._inline[self._size - 1])
            self._inline[self._size - 1] = 0
        elif self._tag is Repr.HEAP:
            self._detach()
            word = self._shared.pop()
        else:
            raise AssertionError(self._tag)
        self._size -= 1
        return word

    def words(self):
        '''Array view of the live words. Read only.'''
        if self._tag is Repr.INLINE:
            return self._inline[:self._size]
        elif self._tag is Repr.HEAP:
            return self._shared.data
        raise AssertionError(self._tag)

    def __eq__(a, b):
        if not isinstance(b, WordStorage):
            return NotImplemented
        if len(a) != len(b):
            return False
        if a._size == 0:
            return True
        return bool(a.xp.all(a.words() == b.words()))

    def __repr__(self):
        return f'WordStorage({list(self)!r}, {self._tag.value}, refs={self.refs})'

def _check_word(word):
    if not 0 <= word <= WORD_MAX:
        raise OverflowError(f'{word} does not fit in a 32-bit word')

if __name__ == '__main__':
    import array_api_strict as xp

    small = WordStorage(3, 7, xp=xp)
    assert small.is_inline and list(small) == [7,7,7]
    small.append(1)
    assert small.is_inline
    small.append(2)
    assert not small.is_inline and list(small) == [7,7,7,1,2]

    shared = small.copy()
    assert shared.shares_buffer(small) and small.refs == 2
    shared[0] = 9
    assert not shared.shares_buffer(small)
    assert small[0] == 7 and shared[0] == 9
    assert small.refs == 1 and shared.refs == 1

    shared.pop()
    shared.pop()
    assert not shared.is_inline
    assert shared.copy().is_inline
    assert shared == WordStorage.from_words([9,7,7], xp=xp)
