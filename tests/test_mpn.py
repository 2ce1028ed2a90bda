"""
Tests for the limb kernels

Covers:
1. Normalization and magnitude comparison
2. Ripple-carry addition, borrow subtraction, single-limb multiply-add
3. Schoolbook multiplication
4. Short division and Knuth long division with its window
5. Shifts, two's complement, popcount and exact log2
"""

import pytest

import mpn
from mpn import BASE, NUMB_MASK, Window
from wordstorage import WordStorage


def from_int(x: int) -> WordStorage:
    d = WordStorage.from_words([x & NUMB_MASK])
    x >>= 32
    while x:
        d.append(x & NUMB_MASK)
        x >>= 32
    return d


def to_int(d: WordStorage) -> int:
    accum = 0
    for word in reversed(list(d)):
        accum = (accum << 32) | word
    return accum


class TestNormalize:
    def test_strips_leading_zero_limbs(self) -> None:
        d = WordStorage.from_words([5, 0, 0])
        mpn.normalize(d)
        assert list(d) == [5]

    def test_keeps_single_zero(self) -> None:
        d = WordStorage.from_words([0, 0, 0, 0, 0, 0])
        mpn.normalize(d)
        assert list(d) == [0]
        assert mpn.is_zero(d)

    def test_cmp_n(self) -> None:
        assert mpn.cmp_n(from_int(BASE), from_int(BASE - 1)) == 1
        assert mpn.cmp_n(from_int(3), from_int(BASE + 3)) == -1
        assert mpn.cmp_n(from_int(BASE + 7), from_int(BASE + 7)) == 0
        assert mpn.cmp_n(from_int(2 * BASE), from_int(BASE + NUMB_MASK)) == 1


class TestAddSub:
    def test_carry_appends_limb(self) -> None:
        d = from_int(NUMB_MASK)
        mpn.add_n(d, from_int(1))
        assert list(d) == [0, 1]

    def test_carry_ripples_through(self) -> None:
        x = (1 << 160) - 1
        assert to_int(mpn.add_n(from_int(x), from_int(1))) == 1 << 160

    def test_shorter_destination_is_extended(self) -> None:
        assert to_int(mpn.add_n(from_int(1), from_int(1 << 100))) == (1 << 100) + 1

    def test_borrow(self) -> None:
        d = mpn.sub_n(from_int(1 << 96), from_int(1))
        assert to_int(d) == (1 << 96) - 1
        assert len(d) == 3

    def test_sub_to_zero_normalizes(self) -> None:
        d = mpn.sub_n(from_int(1 << 200), from_int(1 << 200))
        assert list(d) == [0]

    def test_sub_underflow_asserts(self) -> None:
        with pytest.raises(AssertionError):
            mpn.sub_n(from_int(1), from_int(2))

    def test_incr_u(self) -> None:
        assert to_int(mpn.incr_u(from_int((1 << 64) - 1))) == 1 << 64
        assert to_int(mpn.incr_u(from_int(41))) == 42

    def test_mul_1_with_addend(self) -> None:
        x = 123456789123456789123456789
        assert to_int(mpn.mul_1(from_int(x), 10, 7)) == x * 10 + 7


class TestMul:
    def test_random_products(self, random_int) -> None:
        for _ in range(50):
            a = random_int(signed=False)
            b = random_int(signed=False)
            assert to_int(mpn.mul(from_int(a), from_int(b))) == a * b

    def test_by_zero(self) -> None:
        assert list(mpn.mul(from_int(1 << 200), from_int(0))) == [0]

    def test_operands_untouched(self) -> None:
        a, b = from_int((1 << 190) + 5), from_int((1 << 70) + 3)
        mpn.mul(a, b)
        assert to_int(a) == (1 << 190) + 5
        assert to_int(b) == (1 << 70) + 3


class TestShortDivision:
    def test_hundred_by_seven(self) -> None:
        d = from_int(100)
        assert mpn.divrem_1(d, 7) == 2
        assert to_int(d) == 14

    def test_multi_limb_dividend(self) -> None:
        x = 123456789012345678901234567890
        d = from_int(x)
        assert mpn.divrem_1(d, 987654321) == x % 987654321
        assert to_int(d) == x // 987654321

    def test_zero_divisor(self) -> None:
        with pytest.raises(ZeroDivisionError):
            mpn.divrem_1(from_int(5), 0)


class TestWindow:
    def test_reads_and_writes_offset(self) -> None:
        d = WordStorage.from_words([1, 2, 3, 4, 5])
        w = Window(d, 1, 3)
        assert [w[i] for i in range(len(w))] == [2, 3, 4]
        w[0] = 9
        assert d[1] == 9

    def test_bounds(self) -> None:
        d = WordStorage.from_words([1, 2, 3])
        w = Window(d, 1, 2)
        with pytest.raises(IndexError):
            w[2]
        with pytest.raises(AssertionError):
            Window(d, 2, 2)

    def test_less_than_compares_from_top(self) -> None:
        d = WordStorage.from_words([0, 5, 1, 2])
        w = Window(d, 1, 3)
        assert w.less_than(WordStorage.from_words([6, 1, 3]))
        assert not w.less_than(WordStorage.from_words([9, 1, 1]))
        assert not w.less_than(WordStorage.from_words([5, 1, 2]))

    def test_subtract_borrows(self) -> None:
        d = WordStorage.from_words([7, 0, 1, 0])
        w = Window(d, 1, 3)
        w.subtract(WordStorage.from_words([1, 0, 0]))
        assert list(d) == [7, NUMB_MASK, 0, 0]


class TestKnuth:
    def test_random_quotients(self, random_int) -> None:
        for _ in range(100):
            a = random_int(max_limbs=12, signed=False, min_limbs=2)
            b = random_int(max_limbs=8, signed=False, min_limbs=2)
            if a.bit_length() <= 32 * (len(from_int(b)) - 1):
                a, b = b, a
            da, db = from_int(a), from_int(b)
            if len(da) < len(db):
                continue
            assert to_int(mpn.divrem_knuth(da, db)) == a // b
            assert to_int(da) == a
            assert to_int(db) == b

    def test_equal_length_smaller_dividend(self) -> None:
        a, b = (1 << 63) + 1, (1 << 63) + 2
        assert to_int(mpn.divrem_knuth(from_int(a), from_int(b))) == 0

    def test_divisor_with_small_top_limb(self) -> None:
        a = (1 << 300) - 1
        b = (1 << 64) + NUMB_MASK
        assert to_int(mpn.divrem_knuth(from_int(a), from_int(b))) == a // b

    def test_trial_is_clamped(self) -> None:
        r = WordStorage.from_words([0, NUMB_MASK, NUMB_MASK])
        d = WordStorage.from_words([0, 1 << 31])
        assert mpn.trial(r, 0, 2, d) == NUMB_MASK

    def test_thirty_digit_dividend_by_multi_limb(self) -> None:
        a = 123456789012345678901234567890
        b = 98765432109876543210
        assert to_int(mpn.divrem_knuth(from_int(a), from_int(b))) == a // b


class TestShifts:
    def test_lshift_whole_and_partial_limbs(self) -> None:
        x = 0xDEADBEEFCAFEBABE12345678
        for bits in [0, 1, 31, 32, 33, 64, 95, 130]:
            assert to_int(mpn.lshift(from_int(x), bits)) == x << bits

    def test_lshift_zero_stays_one_limb(self) -> None:
        d = from_int(0)
        assert mpn.lshift(d, 10**8) is d
        assert list(d) == [0]

    def test_rshift_reports_lost_bits(self) -> None:
        d = from_int(7)
        assert mpn.rshift(d, 1) is True
        assert to_int(d) == 3
        d = from_int(8)
        assert mpn.rshift(d, 3) is False
        assert to_int(d) == 1

    def test_rshift_past_width(self) -> None:
        d = from_int(1 << 100)
        assert mpn.rshift(d, 500) is True
        assert list(d) == [0]
        d = from_int(0)
        assert mpn.rshift(d, 64) is False

    def test_rshift_whole_limbs(self) -> None:
        x = (0xABCDEF << 96) | (1 << 40)
        for bits in [32, 40, 41, 64, 96, 97]:
            d = from_int(x)
            lost = mpn.rshift(d, bits)
            assert to_int(d) == x >> bits
            assert lost == bool(x & ((1 << bits) - 1))


class TestBits:
    def test_twos_complement(self) -> None:
        d = mpn.twos_complement(from_int(1), 2)
        assert list(d) == [NUMB_MASK, NUMB_MASK]
        d = mpn.twos_complement(from_int(BASE), 3)
        assert to_int(d) == BASE ** 3 - BASE

    def test_twos_complement_is_involution(self) -> None:
        x = 0x1234567890ABCDEF
        d = mpn.twos_complement(mpn.twos_complement(from_int(x), 3), 3)
        assert to_int(d) == x

    def test_popcount(self) -> None:
        assert mpn.popcount(from_int(0)) == 0
        assert mpn.popcount(from_int(1 << 77)) == 1
        assert mpn.popcount(from_int((1 << 77) | 1)) == 2

    def test_exact_log2(self) -> None:
        assert mpn.exact_log2(from_int(1)) == 0
        assert mpn.exact_log2(from_int(1 << 31)) == 31
        assert mpn.exact_log2(from_int(1 << 200)) == 200

    def test_exact_log2_precondition(self) -> None:
        with pytest.raises(AssertionError):
            mpn.exact_log2(from_int(0))
        with pytest.raises(AssertionError):
            mpn.exact_log2(from_int(6))
