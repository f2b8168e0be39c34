import random
import unittest

from atmfjstc.lib.rar_scope.byte_fields import decode_le


class DecodeLETest(unittest.TestCase):
    def test_two_bytes(self):
        self.assertEqual(decode_le(b'\x01\x02', 0, 1), 0x0201)

    def test_inner_range(self):
        self.assertEqual(decode_le(b'\xff\x52\x61\x72\x21\xff', 1, 4), 0x21726152)

    def test_single_byte(self):
        data = bytes(range(256))

        for i in range(256):
            self.assertEqual(decode_le(data, i, i), i)

    def test_high_bytes_unsigned(self):
        self.assertEqual(decode_le(b'\xff\xff\xff\xff', 0, 3), 0xffffffff)

    def test_eight_bytes(self):
        self.assertEqual(decode_le(b'\x01\x00\x00\x00\x01\x00\x00\x00'), 0x100000001)

    def test_whole_buffer(self):
        self.assertEqual(decode_le(b'\x34\x12'), 0x1234)

    def test_empty_buffer(self):
        self.assertEqual(decode_le(b''), 0)

    def test_end_out_of_range(self):
        self.assertEqual(decode_le(b'\x01\x02\x03', 1, 3), 0)

    def test_negative_start(self):
        self.assertEqual(decode_le(b'\x01\x02\x03', -1, 1), 0)

    def test_only_start_given(self):
        with self.assertRaises(ValueError):
            decode_le(b'\x01\x02', 0)

    def test_never_exceeds_width(self):
        rng = random.Random(1234)

        for _ in range(200):
            data = bytes(rng.randrange(256) for _ in range(16))
            start = rng.randrange(16)
            end = rng.randrange(start, 16)

            value = decode_le(data, start, end)

            self.assertLess(value, 1 << (8 * (end - start + 1)))
            self.assertEqual(value, int.from_bytes(data[start:end + 1], byteorder='little'))


if __name__ == '__main__':
    unittest.main()
