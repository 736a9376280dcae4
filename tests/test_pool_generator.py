from tools.pool_generator import generate_inputs, generate_pool, input_alphabet
from tools.simulate_pool import load_input_pool


def test_input_alphabet_drops_the_blank(parity_definition):
    assert input_alphabet(parity_definition) == ["0", "1"]


def test_generate_inputs_shortest_first():
    assert list(generate_inputs(["a", "b"], 2)) == ["a", "b", "aa", "ab", "ba", "bb"]
    assert list(generate_inputs(["a"], 3, min_length=3)) == ["aaa"]


def test_generate_pool_writes_one_tape_per_line(tmp_path, parity_text):
    definition_path = tmp_path / "parity.tm"
    definition_path.write_text(parity_text, encoding="utf-8")

    pool_file = generate_pool(definition_path, 3, tmp_path / "pools" / "parity.txt")

    tapes = load_input_pool(pool_file)
    assert len(tapes) == 2 + 4 + 8
    assert tapes[:3] == ["0", "1", "00"]
