import pytest

from eth_sdk import formatters as fmt
from eth_sdk.defaults import CallDefaults
from eth_sdk.errors import ArityError, DecodeError, FormatError
from eth_sdk.formatters import FormatterPipeline, decode, encode

ADDR = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
ADDR_LOWER = ADDR.lower()


# --- pipeline ---------------------------------------------------------------


def test_encode_applies_formatters_positionally():
    out = encode([ADDR, 5], [fmt.input_address, None])
    assert out == [ADDR_LOWER, 5]


def test_encode_arity_mismatch_runs_no_formatter():
    seen = []

    def spy(v):
        seen.append(v)
        return v

    with pytest.raises(ArityError) as ei:
        encode([1, 2], [spy], method="m")
    assert (ei.value.method, ei.value.expected, ei.value.got) == ("m", 1, 2)
    assert seen == []


def test_encode_tags_format_error_with_position():
    with pytest.raises(FormatError) as ei:
        encode([ADDR, "nope"], [fmt.input_address, fmt.input_block_number])
    assert ei.value.position == 1


def test_stray_value_error_becomes_format_error():
    def boom(v):
        raise ValueError("bad")

    with pytest.raises(FormatError) as ei:
        encode(["x"], [boom])
    assert ei.value.position == 0
    assert isinstance(ei.value.__cause__, ValueError)


def test_decode_null_and_lists():
    assert decode(None, fmt.hex_to_number) is None
    assert decode(["0x1", None, "0xa"], fmt.hex_to_number) == [1, None, 10]
    assert decode("0x10", None) == "0x10"


def test_decode_failure_is_decode_error():
    with pytest.raises(DecodeError) as ei:
        decode("zz", fmt.hex_to_number, method="getBlockNumber")
    assert ei.value.method == "getBlockNumber"


def test_pipeline_arity():
    assert FormatterPipeline((None, None)).arity == 2
    assert FormatterPipeline().arity == 0


# --- inputs -----------------------------------------------------------------


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, None),
        ("latest", "latest"),
        ("pending", "pending"),
        ("earliest", "earliest"),
        ("genesis", "0x0"),
        ("0xABC", "0xabc"),
        (255, "0xff"),
        ("16", "0x10"),
        (0, "0x0"),
    ],
)
def test_input_block_number(value, expected):
    assert fmt.input_block_number(value) == expected


@pytest.mark.parametrize("value", [-1, "later", True, 1.5])
def test_input_block_number_rejects(value):
    with pytest.raises(FormatError):
        fmt.input_block_number(value)


def test_default_block_substitution_uses_snapshot():
    defaults = CallDefaults(block=100)
    assert fmt.input_default_block_number(None, defaults) == "0x64"
    assert fmt.input_default_block_number("pending", defaults) == "pending"
    assert fmt.input_default_block_number(None, CallDefaults(block=0)) == "0x0"
    assert fmt.input_default_block_number(None, None) == "latest"


def test_input_call_fills_default_account_and_hexes_numbers():
    defaults = CallDefaults(account=ADDR)
    tx = fmt.input_call({"to": ADDR, "gasLimit": 21000, "value": 10, "data": "0x00"}, defaults)
    assert tx == {"from": ADDR_LOWER, "to": ADDR_LOWER, "gas": "0x5208", "value": "0xa", "data": "0x00"}


def test_input_call_rejects_non_hex_data():
    with pytest.raises(FormatError):
        fmt.input_call({"data": "hello"}, CallDefaults())


def test_input_transaction_requires_from():
    with pytest.raises(FormatError):
        fmt.input_transaction({"to": ADDR}, CallDefaults())
    tx = fmt.input_transaction({"from": ADDR, "nonce": "7"}, CallDefaults())
    assert tx["nonce"] == "0x7"


def test_input_sign():
    assert fmt.input_sign("0xdead") == "0xdead"
    assert fmt.input_sign("hi") == "0x6869"
    assert fmt.input_sign(b"\x01") == "0x01"
    with pytest.raises(FormatError):
        fmt.input_sign(5)


def test_input_log():
    flt = fmt.input_log(
        {"fromBlock": 1, "toBlock": "latest", "address": [ADDR], "topics": ["0xAB", None, ["0x01", "0x02"]]}
    )
    assert flt == {
        "fromBlock": "0x1",
        "toBlock": "latest",
        "address": [ADDR_LOWER],
        "topics": ["0xab", None, ["0x01", "0x02"]],
    }
    assert fmt.input_log(None) == {}


# --- outputs ----------------------------------------------------------------


def test_output_syncing_variants():
    assert fmt.output_syncing(False) is False
    flat = fmt.output_syncing({"startingBlock": "0x0", "currentBlock": "0x10", "highestBlock": "0x20"})
    assert flat == {"startingBlock": 0, "currentBlock": 16, "highestBlock": 32}
    assert fmt.output_syncing({"syncing": False}) is False
    env = fmt.output_syncing({"syncing": True, "status": {"currentBlock": 5, "highestBlock": "0x9"}})
    assert env == {"currentBlock": 5, "highestBlock": 9}
    with pytest.raises(DecodeError):
        fmt.output_syncing("yes")


def test_output_log_id_and_checksum():
    out = fmt.output_log(
        {
            "address": ADDR_LOWER,
            "blockHash": "0x" + "11" * 32,
            "transactionHash": "0x" + "22" * 32,
            "logIndex": "0x1",
            "blockNumber": "0x2",
            "transactionIndex": "0x0",
        }
    )
    assert out["address"] == ADDR
    assert out["id"].startswith("log_") and len(out["id"]) == 12
    assert (out["blockNumber"], out["transactionIndex"], out["logIndex"]) == (2, 0, 1)


def test_output_receipt_and_block():
    receipt = fmt.output_receipt({"status": "0x1", "gasUsed": "0x5208", "logs": [], "contractAddress": ADDR_LOWER})
    assert receipt["status"] is True and receipt["gasUsed"] == 21000
    assert receipt["contractAddress"] == ADDR

    block = fmt.output_block(
        {"number": "0x1", "miner": ADDR_LOWER, "transactions": ["0xaa", {"from": ADDR_LOWER, "to": None, "value": "0x1"}]}
    )
    assert block["number"] == 1 and block["miner"] == ADDR
    assert block["transactions"][0] == "0xaa"
    assert block["transactions"][1]["from"] == ADDR and block["transactions"][1]["to"] is None
