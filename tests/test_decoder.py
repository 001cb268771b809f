import unittest
from decimal import Decimal

from ethyl.decoder import (
    block_tag,
    decode_balance,
    decode_data,
    decode_quantity,
    encode_quantity,
    format_units,
    validate_address,
)
from ethyl.errors import DecodeError, InvalidAddressError, MalformedQuantityError, ValidationError
from ethyl.models import Balance


class QuantityTests(unittest.TestCase):
    def test_decodes_hex_quantities(self) -> None:
        self.assertEqual(decode_quantity("0x0"), 0)
        self.assertEqual(decode_quantity("0x3e8"), 1000)
        self.assertEqual(decode_quantity("0x3E8"), 1000)
        self.assertEqual(decode_quantity("0x0001"), 1)

    def test_balance_round_trip_beyond_64_bits(self) -> None:
        for n in [0, 1, 1000, 2**64 - 1, 2**64, 2**70, 10**30 + 7]:
            with self.subTest(n=n):
                self.assertEqual(decode_balance(encode_quantity(n)).value, str(n))

    def test_two_to_the_seventy(self) -> None:
        self.assertEqual(decode_balance("0x400000000000000000").value, "1180591620717411303424")

    def test_rejects_malformed_quantities(self) -> None:
        for raw in [
            "",
            "0x",
            "0x\n",
            "3e8",
            "0xzz",
            "0x 1",
            "-0x1",
            "0x3e8\n",
            " 0x3e8",
            "0x3e8 ",
            "\t0x3e8",
            "0x3e8\r\n",
            1000,
            None,
            True,
            ["0x1"],
        ]:
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedQuantityError) as ctx:
                    decode_balance(raw)
                self.assertIsInstance(ctx.exception, DecodeError)
                self.assertIsInstance(ctx.exception, ValidationError)

    def test_encode_rejects_negative_and_non_int(self) -> None:
        with self.assertRaises(ValueError):
            encode_quantity(-1)
        with self.assertRaises(ValueError):
            encode_quantity(True)
        with self.assertRaises(ValueError):
            encode_quantity(1.5)

    def test_decode_data_normalises_case(self) -> None:
        self.assertEqual(decode_data("0x"), "0x")
        self.assertEqual(decode_data("0x60AB"), "0x60ab")
        for raw in ["0x123", "0x\n", "0x60ab\n", " 0x60ab", "0x60ab "]:
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedQuantityError):
                    decode_data(raw)


class BalanceTests(unittest.TestCase):
    def test_zero_is_a_valid_balance(self) -> None:
        balance = decode_balance("0x0")
        self.assertEqual(balance.value, "0")
        self.assertEqual(balance.wei, 0)

    def test_to_ether_is_exact(self) -> None:
        self.assertEqual(Balance("1500000000000000000").to_ether(), Decimal("1.5"))
        self.assertEqual(Balance("1").to_ether(), Decimal("0.000000000000000001"))

    def test_rejects_non_digit_values(self) -> None:
        for value in ["", "-1", "1.0", "0x10", "²"]:
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    Balance(value)


class AddressAndBlockTests(unittest.TestCase):
    def test_accepts_mixed_case_address(self) -> None:
        address = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
        self.assertEqual(validate_address(address), address)

    def test_rejects_bad_addresses(self) -> None:
        for address in [
            "",
            "0x",
            "f39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
            "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb9226",
            "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb922666",
            "0xg39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
            "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266\n",
            "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266\r\n",
            " 0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
            "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266 ",
            "\t0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
            None,
        ]:
            with self.subTest(address=address):
                with self.assertRaises(InvalidAddressError):
                    validate_address(address)

    def test_block_tags(self) -> None:
        self.assertEqual(block_tag("latest"), "latest")
        self.assertEqual(block_tag("finalized"), "finalized")
        self.assertEqual(block_tag(0), "0x0")
        self.assertEqual(block_tag(255), "0xff")
        for bad in ["newest", -1, True, 1.0]:
            with self.subTest(block=bad):
                with self.assertRaises(ValidationError):
                    block_tag(bad)


class FormatUnitsTests(unittest.TestCase):
    def test_formats_ether_and_tokens(self) -> None:
        self.assertEqual(format_units(1500000000000000000), Decimal("1.5"))
        self.assertEqual(format_units("0xde0b6b3a7640000"), Decimal("1"))
        self.assertEqual(format_units(1234567, decimals=6), Decimal("1.234567"))
        self.assertEqual(format_units(0), Decimal(0))

    def test_keeps_full_precision_for_large_values(self) -> None:
        value = 2**200 + 1
        self.assertEqual(format_units(value, decimals=0), Decimal(value))


if __name__ == "__main__":
    unittest.main()
