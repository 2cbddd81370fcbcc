import pandas as pd
import pytest

from ss3sim_tools.utils.datfile import DatList, read_dat, write_dat, CPUE_COLUMNS


def test_read_dat_sections(dat):
    assert isinstance(dat, DatList)
    assert dat["styr"] == 1
    assert dat["endyr"] == 100
    assert dat["N_cpue"] == 36
    assert list(dat["CPUE"].columns) == CPUE_COLUMNS
    assert len(dat["CPUE"]) == 36
    assert list(dat["CPUEinfo"]["Errtype"]) == [0, 0, -1]
    assert list(dat["fleet_names"]["name"]) == ["Fishery", "Survey1", "Survey2"]


def test_write_then_read_keeps_tables(dat, tmp_path):
    outfile = str(tmp_path / "copy.dat")
    dat["vector"] = [1, 2.5, 3]
    write_dat(dat, outfile)
    again = read_dat(outfile)

    assert again["vector"] == [1, 2.5, 3]
    assert again["N_cpue"] == dat["N_cpue"]
    pd.testing.assert_frame_equal(again["CPUE"], dat["CPUE"], check_dtype=False)
    pd.testing.assert_frame_equal(again["CPUEinfo"], dat["CPUEinfo"], check_dtype=False)


def test_write_empty_table(tmp_path):
    outfile = str(tmp_path / "empty.dat")
    write_dat(DatList({"N_cpue": 0, "CPUE": pd.DataFrame(columns=CPUE_COLUMNS)}), outfile)
    again = read_dat(outfile)
    assert again["N_cpue"] == 0
    assert list(again["CPUE"].columns) == CPUE_COLUMNS
    assert len(again["CPUE"]) == 0


def test_write_refuses_overwrite(dat, tmp_path):
    outfile = tmp_path / "exists.dat"
    outfile.write_text("")
    with pytest.raises(FileExistsError):
        write_dat(dat, str(outfile), overwrite=False)


def test_read_unterminated_table(tmp_path):
    infile = tmp_path / "bad.dat"
    infile.write_text("#_CPUE\n#C year seas index obs se_log\n76 1 2 10 0.1\n")
    with pytest.raises(ValueError):
        read_dat(str(infile))


def test_copy_is_deep(dat):
    replicate = dat.copy()
    replicate["CPUE"].loc[0, "obs"] = -1
    assert dat["CPUE"].loc[0, "obs"] != -1


def test_one_element_vector_stays_a_list(tmp_path):
    outfile = str(tmp_path / "short.dat")
    write_dat(DatList({"months_per_seas": [12], "nseas": 1, "empty": []}), outfile)
    again = read_dat(outfile)
    assert again["months_per_seas"] == [12]
    assert again["nseas"] == 1
    assert again["empty"] == []


def test_unmarked_line_with_several_values_is_a_vector(tmp_path):
    infile = tmp_path / "plain.dat"
    infile.write_text("#_fleet_units\n1 1 2\n#_nseas\n1\n")
    again = read_dat(str(infile))
    assert again["fleet_units"] == [1, 1, 2]
    assert again["nseas"] == 1
