# NOTE: LIMBS are the mp term for WORDS. They mean basically the same thing.
# every routine here works on the magnitude held in a WordStorage,
# least significant limb first, and touches it only through
# indexing, len, append and pop.

from wordstorage import WordStorage

WANT_ASSERT = True
LIMB_BITS = 32
BASE = 1 << LIMB_BITS
NUMB_MASK = BASE - 1
NUMB_MAX = NUMB_MASK

if WANT_ASSERT:
    def ASSERT(expr, msg='assertion failed'):
        assert expr, msg
    def ASSERT_NORMALIZED(d):
        assert len(d) >= 1
        assert len(d) == 1 or d.back() != 0
else:
    def ASSERT(expr, msg=None):
        pass
    def ASSERT_NORMALIZED(d):
        pass

def low(x):
    return x & NUMB_MASK
def high(x):
    return x >> LIMB_BITS

def normalize(d):
    while len(d) > 1 and d.back() == 0:
        d.pop()
    return d

def is_zero(d):
    return len(d) == 1 and d[0] == 0

def cmp_n(a, b):
    if len(a) != len(b):
        return -1 if len(a) < len(b) else 1
    for i in range(len(a) - 1, -1, -1):
        if a[i] != b[i]:
            return -1 if a[i] < b[i] else 1
    return 0

def add_n(d, s):
    '''d += s'''
    if len(s) > len(d):
        d.extend(len(s) - len(d))
    carry = 0
    for i in range(len(d)):
        if i >= len(s) and carry == 0:
            break
        sum_ = d[i] + (s[i] if i < len(s) else 0) + carry
        d[i] = low(sum_)
        carry = high(sum_)
    if carry:
        d.append(carry)
    return d

def sub_n(d, s):
    '''d -= s, with d >= s'''
    ASSERT(cmp_n(d, s) >= 0, 'sub_n underflow')
    borrow = 0
    i = 0
    while i < len(s) or borrow:
        diff = d[i] - (s[i] if i < len(s) else 0) - borrow
        borrow = diff < 0
        d[i] = diff + BASE if borrow else diff
        i += 1
    return normalize(d)

def incr_u(d):
    i = 0
    while i < len(d):
        x = d[i] + 1
        d[i] = low(x)
        if not high(x):
            return d
        i += 1
    d.append(1)
    return d

def mul_1(d, f, addend=0):
    '''d = d * f + addend, for single limbs f and addend'''
    ASSERT(0 <= f <= NUMB_MAX and 0 <= addend <= NUMB_MAX)
    carry = addend
    for i in range(len(d)):
        x = d[i] * f + carry
        d[i] = low(x)
        carry = high(x)
    if carry:
        d.append(carry)
    return normalize(d)

def mul(a, b):
    '''schoolbook product into a fresh storage'''
    na, nb = len(a), len(b)
    r = WordStorage(na + nb, xp=a.xp)
    for i in range(na):
        ai = a[i]
        if ai == 0:
            continue
        carry = 0
        j = 0
        while j < nb or carry:
            x = ai * (b[j] if j < nb else 0) + carry + r[i + j]
            r[i + j] = low(x)
            carry = high(x)
            j += 1
    return normalize(r)

def divrem_1(d, divisor):
    '''d //= divisor in place, returning the remainder'''
    if divisor == 0:
        raise ZeroDivisionError('division by zero')
    ASSERT(0 < divisor <= NUMB_MAX)
    rem = 0
    for i in range(len(d) - 1, -1, -1):
        x = rem * BASE + d[i]
        d[i] = x // divisor
        rem = x % divisor
    normalize(d)
    return rem

class Window:
    '''Limbs [start, start + length) of a storage, for the long division steps.'''
    def __init__(self, storage, start, length):
        ASSERT(start >= 0 and length >= 0 and start + length <= len(storage),
               'window out of bounds')
        self.storage = storage
        self.start = start
        self.length = length
    def __len__(self):
        return self.length
    def _index(self, idx):
        if not 0 <= idx < self.length:
            raise IndexError(idx)
        return self.start + idx
    def __getitem__(self, idx):
        return self.storage[self._index(idx)]
    def __setitem__(self, idx, word):
        self.storage[self._index(idx)] = word
    def less_than(self, other):
        # other is read over the same length, most significant limb first
        ASSERT(len(other) >= self.length)
        for i in range(self.length - 1, -1, -1):
            if self[i] != other[i]:
                return self[i] < other[i]
        return False
    def subtract(self, other):
        borrow = 0
        for i in range(self.length):
            diff = self[i] - other[i] - borrow
            borrow = diff < 0
            self[i] = diff + BASE if borrow else diff
        ASSERT(not borrow, 'window subtraction underflow')
    def __repr__(self):
        return f'Window({[self[i] for i in range(self.length)]!r}, start={self.start})'

def trial(r, k, m, d):
    '''quotient limb estimate from the top three limbs of the window at k
    and the top two limbs of the normalized divisor'''
    r3 = (r[k + m] * BASE + r[k + m - 1]) * BASE + r[k + m - 2]
    d2 = d[m - 1] * BASE + d[m - 2]
    return min(r3 // d2, NUMB_MAX)

def divrem_knuth(a, b):
    '''Knuth algorithm D. a and b are normalized magnitudes with
    len(a) >= len(b) >= 2. Returns the quotient magnitude.'''
    n, m = len(a), len(b)
    ASSERT(n >= m >= 2)
    # scaling lifts the divisor's top limb to at least BASE/2
    f = BASE // (b[m - 1] + 1)
    r = mul_1(a.copy(), f)
    d = mul_1(b.copy(), f)
    ASSERT(len(d) == m and d[m - 1] >= BASE // 2, 'divisor not normalized')
    r.extend(n + 1 - len(r))
    q = WordStorage(n - m + 1, xp=a.xp)
    for k in range(n - m, -1, -1):
        qt = trial(r, k, m, d)
        dq = mul_1(d.copy(), qt)
        dq.extend(m + 1 - len(dq))
        window = Window(r, k, m + 1)
        if window.less_than(dq):
            qt -= 1
            dq = mul_1(d.copy(), qt)
            dq.extend(m + 1 - len(dq))
            ASSERT(not window.less_than(dq), 'trial quotient off by more than one')
        window.subtract(dq)
        q[k] = qt
    return normalize(q)

def lshift(d, bits):
    ASSERT(bits >= 0)
    if is_zero(d):
        return d
    n_added = bits // LIMB_BITS
    shift = bits % LIMB_BITS
    d.extend(n_added)
    # from the top down so nothing is overwritten before it moves
    for i in range(len(d) - n_added - 1, -1, -1):
        d[i + n_added], d[i] = d[i], d[i + n_added]
    carry = 0
    for i in range(n_added, len(d)):
        x = (d[i] << shift) | carry
        d[i] = low(x)
        carry = high(x)
    d.append(carry)
    return normalize(d)

def rshift(d, bits):
    '''shifts d down in place. returns True if a set bit was shifted out.'''
    ASSERT(bits >= 0)
    n_deleted = bits // LIMB_BITS
    shift = bits % LIMB_BITS
    if n_deleted >= len(d):
        lost = not is_zero(d)
        while len(d) > 1:
            d.pop()
        d[0] = 0
        return lost
    lost = any(d[i] for i in range(n_deleted))
    lost = lost or bool(d[n_deleted] & ((1 << shift) - 1))
    for i in range(len(d) - n_deleted):
        d[i] = d[i + n_deleted]
    for i in range(n_deleted):
        d.pop()
    carry = 0
    for i in range(len(d) - 1, -1, -1):
        x = d[i] << (LIMB_BITS - shift)
        d[i] = high(x) | carry
        carry = low(x)
    normalize(d)
    return lost

def com(d):
    for i in range(len(d)):
        d[i] = d[i] ^ NUMB_MASK
    return d

def twos_complement(d, width):
    '''negate d modulo BASE**width, in place'''
    ASSERT(len(d) <= width)
    d.extend(width - len(d))
    com(d)
    for i in range(width):
        x = d[i] + 1
        d[i] = low(x)
        if not high(x):
            break
    return d

def popcount(d):
    return sum(word.bit_count() for word in d)

def exact_log2(d):
    '''pre: d is a power of two'''
    skipped = 0
    for word in d:
        if word:
            ASSERT(word.bit_count() == 1, 'pre-condition is not followed')
            return skipped + word.bit_length() - 1
        skipped += LIMB_BITS
    raise AssertionError('pre-condition is not followed')

if __name__ == '__main__':
    import numpy as np
    rng = np.random.default_rng(0)

    def to_int(d):
        accum = 0
        for word in reversed(list(d)):
            accum = (accum << LIMB_BITS) | word
        return accum
    def from_int(x):
        d = WordStorage.from_words([x & NUMB_MASK])
        x >>= LIMB_BITS
        while x:
            d.append(x & NUMB_MASK)
            x >>= LIMB_BITS
        return d

    for idx in range(64):
        a = int.from_bytes(rng.bytes(int(rng.integers(1, 40))), 'little') + 1
        b = int.from_bytes(rng.bytes(int(rng.integers(1, 24))), 'little') + 1
        assert to_int(add_n(from_int(a), from_int(b))) == a + b
        assert to_int(mul(from_int(a), from_int(b))) == a * b
        da, db = from_int(a), from_int(b)
        if len(da) >= len(db) >= 2:
            assert to_int(divrem_knuth(da, db)) == a // b
