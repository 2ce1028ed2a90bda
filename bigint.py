# representation:
#  sign flag + magnitude, the magnitude as uint32 limbs in a WordStorage,
#    least significant first, no leading zero limbs except for zero itself.
#  zero is never negative.
#  in-place operators mutate the value and return it; the binary operators
#    copy the left operand (sharing any heap buffer until written) and then
#    run the in-place form on the copy.
#  division and modulo truncate toward zero. right shifts floor.

import operator

import mpn
from mpn import LIMB_BITS, NUMB_MASK
from wordstorage import WordStorage

DIGITS = '0123456789'

class ParseError(ValueError):
    pass

class BigInt:
    def __init__(self, value=0):
        if isinstance(value, BigInt):
            self._sign = value._sign
            self._digits = value._digits.copy()
        elif isinstance(value, str):
            self._sign = False
            self._digits = WordStorage(1)
            self._parse(value)
        else:
            # python ints and numpy integer scalars alike
            try:
                value = operator.index(value)
            except TypeError:
                raise TypeError(f'cannot build a BigInt from {type(value).__name__}') from None
            # magnitude first, so the most negative machine values need no care
            self._sign = value < 0
            magnitude = -value if self._sign else value
            self._digits = WordStorage(1, magnitude & NUMB_MASK)
            magnitude >>= LIMB_BITS
            while magnitude:
                self._digits.append(magnitude & NUMB_MASK)
                magnitude >>= LIMB_BITS

    @classmethod
    def from_word(cls, word):
        word = operator.index(word)
        if not 0 <= word <= NUMB_MASK:
            raise OverflowError(f'{word} is not an unsigned 32-bit word')
        return cls(word)

    @classmethod
    def parse(cls, numeral):
        if not isinstance(numeral, str):
            raise TypeError(f'expected a str numeral, found {type(numeral).__name__}')
        return cls(numeral)

    def _parse(self, numeral):
        if not numeral:
            raise ParseError('expected an integer, found an empty string')
        negative = numeral[0] == '-'
        body = numeral[1:] if negative else numeral
        if not body:
            raise ParseError("expected a digit after '-'")
        for ch in body:
            if ch not in DIGITS:
                raise ParseError(f'expected a digit, found {ch!r}')
            # horner: result = result * 10 + digit
            mpn.mul_1(self._digits, 10, ord(ch) - ord('0'))
        self._sign = negative
        self._canonicalize()

    def _canonicalize(self):
        mpn.normalize(self._digits)
        if mpn.is_zero(self._digits):
            self._sign = False
        mpn.ASSERT_NORMALIZED(self._digits)
        return self

    @property
    def sign(self):
        '''True when negative.'''
        return self._sign
    @property
    def limbs(self):
        return len(self._digits)

    # additive

    def _aors(x, y, negate):
        y = _coerce(y)
        if y is NotImplemented:
            return y
        if y is x:
            y = BigInt(y)
        ysign = y._sign ^ negate
        if x._sign == ysign:
            mpn.add_n(x._digits, y._digits)
        elif mpn.cmp_n(x._digits, y._digits) >= 0:
            mpn.sub_n(x._digits, y._digits)
        else:
            # |x| < |y|: the difference takes y's sign
            digits = y._digits.copy()
            mpn.sub_n(digits, x._digits)
            x._digits.assign(digits)
            x._sign = ysign
        return x._canonicalize()

    def __iadd__(x, y):
        return x._aors(y, False)
    def __isub__(x, y):
        return x._aors(y, True)

    # multiplicative

    def __imul__(x, y):
        y = _coerce(y)
        if y is NotImplemented:
            return y
        if not x._sign and mpn.popcount(x._digits) == 1:
            bits = mpn.exact_log2(x._digits)
            x._sign = y._sign
            x._digits.assign(y._digits)
            return x.__ilshift__(bits)
        elif not y._sign and mpn.popcount(y._digits) == 1:
            return x.__ilshift__(mpn.exact_log2(y._digits))
        x._digits.assign(mpn.mul(x._digits, y._digits))
        x._sign = x._sign ^ y._sign
        return x._canonicalize()

    def __itruediv__(x, y):
        y = _coerce(y)
        if y is NotImplemented:
            return y
        if mpn.is_zero(y._digits):
            raise ZeroDivisionError('division by zero')
        sign = x._sign ^ y._sign
        if len(x._digits) < len(y._digits):
            x._digits.assign(WordStorage(1))
        elif len(y._digits) == 1:
            mpn.divrem_1(x._digits, y._digits[0])
        elif not y._sign and mpn.popcount(y._digits) == 1:
            # shifting the magnitude keeps truncation toward zero
            mpn.rshift(x._digits, mpn.exact_log2(y._digits))
        else:
            x._digits.assign(mpn.divrem_knuth(x._digits, y._digits))
        x._sign = sign
        return x._canonicalize()

    def __imod__(x, y):
        y = _coerce(y)
        if y is NotImplemented:
            return y
        return x.__isub__(x / y * y)

    def __divmod__(x, y):
        y = _coerce(y)
        if y is NotImplemented:
            return y
        q = x / y
        return q, x - q * y
    def __rdivmod__(y, x):
        x = _coerce(x)
        if x is NotImplemented:
            return x
        return divmod(x, y)

    # bitwise, over two's complement one limb wider than either operand

    def _bitwise(x, y, op):
        y = _coerce(y)
        if y is NotImplemented:
            return y
        width = max(len(x._digits), len(y._digits)) + 1
        a = x._digits.copy()
        b = y._digits.copy()
        for digits, sign in [[a, x._sign], [b, y._sign]]:
            if sign:
                mpn.twos_complement(digits, width)
            else:
                digits.extend(width - len(digits))
        sign = op(int(x._sign), int(y._sign)) & 1
        for i in range(width):
            a[i] = op(a[i], b[i]) & NUMB_MASK
        if sign:
            mpn.twos_complement(a, width)
        x._digits.assign(a)
        x._sign = bool(sign)
        return x._canonicalize()

    def __iand__(x, y):
        return x._bitwise(y, operator.and_)
    def __ior__(x, y):
        return x._bitwise(y, operator.or_)
    def __ixor__(x, y):
        return x._bitwise(y, operator.xor)

    # shifts

    def __ilshift__(x, bits):
        bits = operator.index(bits)
        if bits < 0:
            return x.__irshift__(-bits)
        mpn.lshift(x._digits, bits)
        return x._canonicalize()

    def __irshift__(x, bits):
        bits = operator.index(bits)
        if bits < 0:
            return x.__ilshift__(-bits)
        lost = mpn.rshift(x._digits, bits)
        if x._sign and lost:
            # round toward negative infinity: (-7) >> 1 == -4
            mpn.incr_u(x._digits)
        return x._canonicalize()

    # unary

    def __pos__(self):
        return BigInt(self)
    def __neg__(self):
        result = BigInt(self)
        if not mpn.is_zero(result._digits):
            result._sign = not result._sign
        return result
    def __abs__(self):
        result = BigInt(self)
        result._sign = False
        return result
    def __invert__(self):
        result = -self
        result -= 1
        return result

    def increment(self):
        return self.__iadd__(1)
    def decrement(self):
        return self.__isub__(1)
    def post_increment(self):
        old = BigInt(self)
        self.increment()
        return old
    def post_decrement(self):
        old = BigInt(self)
        self.decrement()
        return old

    # comparison

    def _cmp(x, y):
        if x._sign != y._sign:
            return -1 if x._sign else 1
        c = mpn.cmp_n(x._digits, y._digits)
        return -c if x._sign else c

    def __eq__(x, y):
        y = _coerce(y)
        if y is NotImplemented:
            return y
        return x._sign == y._sign and x._digits == y._digits
    def __lt__(x, y):
        y = _coerce(y)
        if y is NotImplemented:
            return y
        return x._cmp(y) < 0
    def __le__(x, y):
        y = _coerce(y)
        if y is NotImplemented:
            return y
        return x._cmp(y) <= 0
    def __gt__(x, y):
        y = _coerce(y)
        if y is NotImplemented:
            return y
        return x._cmp(y) > 0
    def __ge__(x, y):
        y = _coerce(y)
        if y is NotImplemented:
            return y
        return x._cmp(y) >= 0

    __hash__ = None

    def __bool__(self):
        return not mpn.is_zero(self._digits)

    # conversion

    def __int__(self):
        accum = 0
        for word in reversed(list(self._digits)):
            accum = (accum << LIMB_BITS) | word
        return -accum if self._sign else accum
    __index__ = __int__

    def __str__(self):
        if mpn.is_zero(self._digits):
            return '0'
        digits = self._digits.copy()
        chars = []
        while not mpn.is_zero(digits):
            chars.append(DIGITS[mpn.divrem_1(digits, 10)])
        if self._sign:
            chars.append('-')
        return ''.join(reversed(chars))

    def __repr__(self):
        return f"BigInt('{self}')"

    __copy__ = __pos__

def _coerce(y):
    if isinstance(y, BigInt):
        return y
    try:
        return BigInt(operator.index(y))
    except TypeError:
        return NotImplemented

def to_string(a):
    return str(a)

def __BigIntOpBinary(opname):
    iop = getattr(BigInt, f'__i{opname}__')
    def op(x, y):
        return iop(BigInt(x), y)
    op.__name__ = f'__{opname}__'
    return op
def __BigIntOpReflected(opname):
    iop = getattr(BigInt, f'__i{opname}__')
    def op(y, x):
        x = _coerce(x)
        if x is NotImplemented:
            return x
        return iop(BigInt(x), y)
    op.__name__ = f'__r{opname}__'
    return op
for prefix, factory, opnames in [
        ['', __BigIntOpBinary,
            ['add','sub','mul','truediv','mod','and','or','xor','lshift','rshift']],
        ['r', __BigIntOpReflected,
            ['add','sub','mul','truediv','mod','and','or','xor','lshift','rshift']],
]:
    for opname in opnames:
        setattr(BigInt, f'__{prefix}{opname}__', factory(opname))

if __name__ == '__main__':
    import numpy as np
    rng = np.random.default_rng(0)

    def random_int(max_limbs):
        nbytes = int(rng.integers(1, 4 * max_limbs + 1))
        value = int.from_bytes(rng.bytes(nbytes), 'little')
        return -value if rng.integers(2) else value

    for idx in range(256):
        a, b = random_int(12), random_int(12)
        x, y = BigInt(a), BigInt(b)
        assert int(x + y) == a + b
        assert int(x - y) == a - b
        assert int(x * y) == a * b
        assert int(x & y) == a & b
        assert int(x | y) == a | b
        assert int(x ^ y) == a ^ b
        if b:
            q, r = divmod(x, y)
            assert q * y + r == x
            assert int(q) == abs(a) // abs(b) * (-1 if (a < 0) != (b < 0) else 1)
        assert BigInt(str(x)) == x
    assert str(BigInt('-0')) == '0'
    assert int(BigInt(-7) >> 1) == -4
