import numpy as np
import pytest

from mmdp.generators import GENERATORS
from mmdp.generators import main as generate_main
from mmdp.instance import Instance, pair_sum, read_instance, write_instance


def test_instance_is_read_only_copy():
    m = np.array([[0.0, 2.0], [2.0, 0.0]])
    inst = Instance(m)
    m[0, 1] = 5.0
    assert inst.dist(0, 1) == 2.0
    assert inst.distance(1, 0) == 2.0
    assert inst.size() == 2
    with pytest.raises(ValueError):
        inst.d[0, 1] = 1.0


def test_instance_rejects_bad_matrices():
    with pytest.raises(ValueError):
        Instance(np.zeros((2, 3)))
    with pytest.raises(ValueError):
        Instance(np.array([[0.0, 1.0], [2.0, 0.0]]))


def test_read_write_instance(tmp_path, small_instance):
    path = tmp_path / "inst.txt"
    write_instance(small_instance, str(path), decimals=6)
    inst = read_instance(str(path))
    assert inst.n == small_instance.n
    np.testing.assert_allclose(inst.d, small_instance.d, atol=1e-6)


def test_read_instance_format(tmp_path):
    path = tmp_path / "tiny.txt"
    path.write_text("1 2 3.5\n\n2 4 -1\n")
    inst = read_instance(str(path))
    assert inst.n == 4
    assert inst.dist(0, 1) == 3.5
    assert inst.dist(3, 1) == -1.0
    assert inst.dist(0, 2) == 0.0


@pytest.mark.parametrize('content', ["1 2\n", "1 x 3\n", "0 2 1.0\n"])
def test_read_instance_rejects_malformed_lines(tmp_path, content):
    path = tmp_path / "bad.txt"
    path.write_text(content)
    with pytest.raises(ValueError):
        read_instance(str(path))


def test_read_instance_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_instance(str(tmp_path / "nope.txt"))


def test_pair_sum(four_vertex_instance):
    assert pair_sum(four_vertex_instance.d, [0, 1, 3]) == pytest.approx(18.0)
    assert pair_sum(four_vertex_instance.d, [2]) == 0.0
    assert pair_sum(four_vertex_instance.d, []) == 0.0


@pytest.mark.parametrize('name', sorted(GENERATORS))
def test_generators_produce_valid_instances(name):
    inst = GENERATORS[name](15, np.random.default_rng(3))
    assert inst.n == 15
    np.testing.assert_array_equal(inst.d, inst.d.T)
    assert not np.diag(inst.d).any()
    assert np.abs(inst.d).max() <= 10.0


def test_generate_command_writes_readable_instance(tmp_path, capsys):
    path = tmp_path / "ii_30.txt"
    assert generate_main(['II', '30', '-s', '8', '-o', str(path)]) == 0
    assert "30 vertices" in capsys.readouterr().out

    inst = read_instance(str(path))
    assert inst.n == 30
    off_diagonal = inst.d[~np.eye(30, dtype=bool)]
    assert np.all(np.abs(off_diagonal) >= 5.0)
    assert np.all(np.abs(off_diagonal) <= 10.0)


def test_generate_command_is_reproducible(tmp_path):
    a, b = tmp_path / "a.txt", tmp_path / "b.txt"
    generate_main(['I', '12', '-s', '3', '-o', str(a)])
    generate_main(['I', '12', '-s', '3', '-o', str(b)])
    assert a.read_text() == b.read_text()


def test_generate_command_rejects_tiny_instances(tmp_path):
    with pytest.raises(SystemExit):
        generate_main(['IV', '1', '-o', str(tmp_path / "x.txt")])
