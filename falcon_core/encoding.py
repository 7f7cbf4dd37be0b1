"""
Compact encodings of Falcon keys and signatures.

All the bit strings are big-endian: the first coefficient goes to the most
significant bits of the first byte. Unused bits of the last byte are
padding and must be zero.

- public key:  0x00 + logn | h, 14 bits per coefficient
- secret key:  0x50 + logn | f, g on fg_bits[logn] bits, F on FG_bits bits
- signature:   0x30 + logn | salt (40 bytes) | compressed s2
"""
from .common import q
from .errors import InvalidKeyEncoding, InvalidSignatureEncoding
from .params import HEAD_LEN, SALT_LEN, logn


# Bit length of the coefficients of f, g and of F, G, indexed by logn
fg_bits = [0, 8, 8, 8, 8, 8, 7, 7, 6, 6, 5]
FG_bits = 8

# Bit length of the coefficients of the public key
PUBKEY_BITS = 14

# Largest absolute value of a compressed coefficient
MAX_COMPRESSED = 2047


def compress(v, slen):
    """
    Take as input a list of integers v and a bytelength slen, and
    return a bytestring of length slen that encode/compress v.
    If this is not possible, return False.

    For each coefficient of v:
    - the sign is encoded on 1 bit
    - the 7 lower bits are encoded naively (binary)
    - the high bits are encoded in unary encoding

    Corresponds to algorithm 17 (Compress) of Falcon's documentation.
    """
    u = ""
    for coef in v:
        if abs(coef) > MAX_COMPRESSED:
            return False
        # Encode the sign
        s = "1" if coef < 0 else "0"
        # Encode the low bits
        s += format((abs(coef) % (1 << 7)), '#09b')[2:]
        # Encode the high bits
        s += "0" * (abs(coef) >> 7) + "1"
        u += s
    # The encoding is too long
    if len(u) > 8 * slen:
        return False
    u += "0" * (8 * slen - len(u))
    w = [int(u[8 * i: 8 * i + 8], 2) for i in range(len(u) // 8)]
    return bytes(w)


def decompress(x, slen, n):
    """
    Take as input an encoding x, a bytelength slen and a length n, and
    return a list of integers v of length n such that x encode v.

    Raise InvalidSignatureEncoding if the encoding is invalid: wrong
    length, truncated, coefficient out of range, -0, or non-zero padding.

    Corresponds to algorithm 18 (Decompress) of Falcon's documentation.
    """
    if len(x) != slen:
        raise InvalidSignatureEncoding("expected %d bytes, got %d" % (slen, len(x)))
    u = "".join(format(elt, "08b") for elt in x)
    v = []
    i = 0
    for _ in range(n):
        if i + 9 > len(u):
            raise InvalidSignatureEncoding("the encoding is truncated")
        sign = -1 if u[i] == "1" else 1
        low = int(u[i + 1:i + 8], 2)
        i += 8
        high = 0
        while u[i] == "0":
            high += 1
            i += 1
            if (high << 7) > MAX_COMPRESSED or i >= len(u):
                raise InvalidSignatureEncoding("invalid unary encoding of the high bits")
        i += 1
        if (low == 0) and (high == 0) and (sign == -1):
            raise InvalidSignatureEncoding("negative zero")
        v.append(sign * (low + (high << 7)))
    if "1" in u[i:]:
        raise InvalidSignatureEncoding("non-zero padding")
    return v


def pack_fields(fields):
    """
    Concatenate, MSB first, the 'bits' low bits of each value of each
    field (values, bits), and pad with zeros to a whole number of bytes.
    """
    acc = 0
    total = 0
    for values, bits in fields:
        mask = (1 << bits) - 1
        for elt in values:
            acc = (acc << bits) | (elt & mask)
        total += bits * len(values)
    bytelen = (total + 7) >> 3
    return (acc << (8 * bytelen - total)).to_bytes(bytelen, "big")


def unpack_fields(data, layout):
    """
    Inverse of pack_fields for a layout [(count, bits), ...].
    Return the lists of unsigned values and the value of the padding bits.
    """
    total = sum(count * bits for count, bits in layout)
    pad = 8 * len(data) - total
    acc = int.from_bytes(data, "big")
    padding = acc & ((1 << pad) - 1)
    pos = 8 * len(data)
    res = []
    for count, bits in layout:
        mask = (1 << bits) - 1
        values = []
        for _ in range(count):
            pos -= bits
            values.append((acc >> pos) & mask)
        res.append(values)
    return res, padding


def pubkey_bytelen(n):
    return HEAD_LEN + ((PUBKEY_BITS * n + 7) >> 3)


def seckey_bytelen(n):
    return HEAD_LEN + ((2 * fg_bits[logn[n]] * n + FG_bits * n + 7) >> 3)


def encode_public_key(h):
    """Encode the public key h (coefficients in [0, q - 1])."""
    n = len(h)
    if (min(h) < 0) or (max(h) >= q):
        raise ValueError("The entries of h are outside bounds")
    header = bytes([0x00 + logn[n]])
    return header + pack_fields([(h, PUBKEY_BITS)])


def decode_public_key(data, n):
    """Decode a public key of degree n, raise InvalidKeyEncoding if malformed."""
    if len(data) != pubkey_bytelen(n):
        raise InvalidKeyEncoding("expected %d bytes, got %d" % (pubkey_bytelen(n), len(data)))
    if data[0] != 0x00 + logn[n]:
        raise InvalidKeyEncoding("invalid public key header 0x%02x" % data[0])
    [h], padding = unpack_fields(data[HEAD_LEN:], [(n, PUBKEY_BITS)])
    if padding:
        raise InvalidKeyEncoding("non-zero padding")
    if any(coef >= q for coef in h):
        raise InvalidKeyEncoding("coefficient of the public key is not reduced mod q")
    return h


def fits(poly, bits):
    """Check that poly is encodable on 'bits' bits in two's complement, -2 ** (bits - 1) excluded."""
    bound = (1 << (bits - 1)) - 1
    return all(-bound <= coef <= bound for coef in poly)


def _to_signed(values, bits):
    """Two's complement interpretation; -2 ** (bits - 1) is rejected."""
    res = []
    for elt in values:
        if elt == 1 << (bits - 1):
            raise InvalidKeyEncoding("forbidden value -2 ** %d" % (bits - 1))
        res.append(elt - (1 << bits) if elt >> (bits - 1) else elt)
    return res


def encode_secret_key(f, g, F):
    """Encode (f, g, F); G is not stored since it can be recomputed."""
    n = len(f)
    fgb = fg_bits[logn[n]]
    fields = [(f, fgb), (g, fgb), (F, FG_bits)]
    for poly, bits in fields:
        if not fits(poly, bits):
            raise ValueError("coefficient does not fit on %d bits" % bits)
    header = bytes([0x50 + logn[n]])
    return header + pack_fields(fields)


def decode_secret_key(data, n):
    """
    Decode a secret key of degree n into (f, g, F).
    Raise InvalidKeyEncoding if the bytestring is malformed.
    """
    if len(data) != seckey_bytelen(n):
        raise InvalidKeyEncoding("expected %d bytes, got %d" % (seckey_bytelen(n), len(data)))
    if data[0] != 0x50 + logn[n]:
        raise InvalidKeyEncoding("invalid secret key header 0x%02x" % data[0])
    fgb = fg_bits[logn[n]]
    layout = [(n, fgb), (n, fgb), (n, FG_bits)]
    (f, g, F), padding = unpack_fields(data[HEAD_LEN:], layout)
    if padding:
        raise InvalidKeyEncoding("non-zero padding")
    return _to_signed(f, fgb), _to_signed(g, fgb), _to_signed(F, FG_bits)


def encode_signature(salt, s2, param):
    """Encode a signature (salt, s2), return False if s2 is too long to be compressed."""
    enc_s = compress(s2, param.sig_bytelen - HEAD_LEN - SALT_LEN)
    if enc_s is False:
        return False
    header = bytes([0x30 + param.logn])
    return header + salt + enc_s


def decode_signature(signature, param):
    """
    Decode a signature into (salt, s2).
    Raise InvalidSignatureEncoding if the bytestring is malformed.
    """
    if len(signature) != param.sig_bytelen:
        raise InvalidSignatureEncoding(
            "expected %d bytes, got %d" % (param.sig_bytelen, len(signature)))
    if signature[0] != 0x30 + param.logn:
        raise InvalidSignatureEncoding("invalid signature header 0x%02x" % signature[0])
    salt = signature[HEAD_LEN:HEAD_LEN + SALT_LEN]
    enc_s = signature[HEAD_LEN + SALT_LEN:]
    s2 = decompress(enc_s, param.sig_bytelen - HEAD_LEN - SALT_LEN, param.n)
    return salt, s2
